from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from certhub.config import settings
from certhub.errors import CertHubError
from certhub.services.platform import CertHubService

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Seed demo content on startup when enabled"""
    logger.info("%s is starting...", settings.app_name)
    if settings.seed_demo_data:
        app.state.service.seed_demo_data(settings.demo_data_file or None)
    if settings.bootstrap_admin_list:
        logger.info("Bootstrap admins: %s", ", ".join(settings.bootstrap_admin_list))
    yield
    logger.info("%s is shutting down", settings.app_name)


async def certhub_error_handler(request: Request, exc: CertHubError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


def create_app(service: Optional[CertHubService] = None) -> FastAPI:
    """Build the API around ``service``, a fresh one by default"""
    app = FastAPI(
        title=settings.app_name,
        version=settings.api_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.service = service or CertHubService(bootstrap_admins=settings.bootstrap_admin_list)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(CertHubError, certhub_error_handler)

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.api_version,
            "status": "running"
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy"}

    # Import and include routers
    from certhub.routes import users, exams, questions

    app.include_router(users.router, prefix="/api/users", tags=["Users"])
    app.include_router(exams.router, prefix="/api/exams", tags=["Exams"])
    app.include_router(questions.router, prefix="/api/questions", tags=["Questions"])

    return app


app = create_app()


def run():
    """Console entry point"""
    import uvicorn

    uvicorn.run("certhub.main:app", host=settings.host, port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    run()
