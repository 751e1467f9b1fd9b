from pydantic import BaseModel, Field
from typing import Optional, List
from certhub.models import Certificate, Level, Question, UserRole
from certhub.services.grading import GradeReport


# =============================================================================
# User Schemas (for routes/users.py)
# =============================================================================

class RegisterRequest(BaseModel):
    """Register the caller, or refresh last login if already registered."""
    username: str = Field(min_length=1)


class PromoteRequest(BaseModel):
    """Change another user's role (admin only)."""
    target_principal: str
    role: UserRole = UserRole.ADMIN


# =============================================================================
# Exam Schemas (for routes/exams.py)
# =============================================================================

class CreateExamRequest(BaseModel):
    """Request to create a new exam."""
    title: str
    organization_name: str
    questions: List[Question]
    level: Level = Level.BEGINNER


class CreateExamResponse(BaseModel):
    exam_id: int


class SubmitAnswersRequest(BaseModel):
    """Answers in question order; answers[i] is the chosen text for question i."""
    answers: List[str]


class SubmitAnswersResponse(BaseModel):
    """Result of a graded submission."""
    score: int
    certificate_id: int
    certificate: Certificate
    report: GradeReport


# =============================================================================
# Question Bank Schemas (for routes/questions.py)
# =============================================================================

class StoreQuestionRequest(BaseModel):
    """Request to store a standalone, category-indexed question."""
    text: str
    choices: List[str]
    correct_answer_index: int = Field(ge=0)
    categories: List[str] = []
    difficulty: int = Field(ge=0, default=0)
    score: int = Field(ge=0, default=1)


class StoreQuestionResponse(BaseModel):
    question_id: int


class CategorySummary(BaseModel):
    category: str
    question_count: int


class MessageResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
