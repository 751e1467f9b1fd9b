from datetime import datetime
from pydantic import BaseModel


class Certificate(BaseModel):
    """Proof of one completed exam attempt. Never mutated or deleted."""
    id: int
    exam_id: int
    user_principal: str
    score: int
    awarded_at: datetime
