from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from certhub.config import settings
from certhub.deps import get_caller, get_service
from certhub.models import StoredQuestion
from certhub.schemas import (
    CategorySummary,
    MessageResponse,
    StoreQuestionRequest,
    StoreQuestionResponse,
)
from certhub.services.platform import CertHubService

router = APIRouter(tags=["Questions"])


@router.post("", response_model=StoreQuestionResponse)
def store_question(request: StoreQuestionRequest, service: CertHubService = Depends(get_service)):
    """Store a standalone question and index it under each of its categories"""
    question_id = service.store_question(
        text=request.text,
        choices=request.choices,
        correct_answer_index=request.correct_answer_index,
        categories=request.categories,
        difficulty=request.difficulty,
        score=request.score,
    )
    return {"question_id": question_id}


@router.get("/categories", response_model=List[CategorySummary])
def list_categories(service: CertHubService = Depends(get_service)):
    return [
        {"category": category, "question_count": count}
        for category, count in service.category_summary()
    ]


@router.get("/categories/{category}", response_model=List[StoredQuestion])
def get_category_questions(
    category: str,
    limit: int = Query(default=settings.default_category_limit, ge=0, le=settings.max_category_limit),
    service: CertHubService = Depends(get_service),
):
    """
    Up to ``limit`` questions in a category.
    Order is unspecified and may differ between calls; unknown categories
    return an empty list.
    """
    return service.get_category_questions(category, limit)


@router.get("/{question_id}", response_model=Optional[StoredQuestion])
def get_question(question_id: int, service: CertHubService = Depends(get_service)):
    """The question, or null if there is none with this id"""
    return service.get_question(question_id)


@router.delete("/{question_id}", response_model=MessageResponse)
def delete_question(
    question_id: int,
    caller: str = Depends(get_caller),
    service: CertHubService = Depends(get_service),
):
    """Delete a question and drop it from the category index (admin only)"""
    service.delete_question(caller, question_id)
    return {"success": True, "message": f"Question {question_id} deleted"}
