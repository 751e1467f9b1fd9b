from typing import List, Optional
from pydantic import BaseModel, Field
import enum


class Level(str, enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Question(BaseModel):
    """Multiple-choice question, embedded in an exam or stored on its own"""
    text: str
    choices: List[str]
    correct_answer_index: int = Field(ge=0)
    score: int = Field(ge=0, default=1)  # points awarded for a correct answer
    categories: List[str] = Field(default_factory=list)
    difficulty: int = Field(ge=0, default=0)

    def correct_choice(self) -> Optional[str]:
        """Text of the correct choice, or None if the index points nowhere."""
        if 0 <= self.correct_answer_index < len(self.choices):
            return self.choices[self.correct_answer_index]
        return None


class StoredQuestion(Question):
    """Standalone question kept in the category-indexed question bank"""
    id: int


class Exam(BaseModel):
    """Exams created by admins"""
    id: int
    title: str
    organization_name: str
    questions: List[Question] = Field(default_factory=list)
    level: Level = Level.BEGINNER

    @property
    def max_score(self) -> int:
        return sum(q.score for q in self.questions)
