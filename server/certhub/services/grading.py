"""
Grading Engine.

Answers are matched to questions by position. A submitted answer counts
when it is exactly (case-sensitive) the text of the question's correct
choice. Answers past the last question are ignored and unanswered
questions simply earn nothing.
"""
from typing import List, Optional, Sequence

from pydantic import BaseModel

from certhub.models import Exam


class QuestionOutcome(BaseModel):
    index: int
    submitted: Optional[str] = None
    is_correct: bool
    points_awarded: int


class GradeReport(BaseModel):
    score: int
    max_score: int
    correct_count: int
    total_questions: int
    percentage: float
    outcomes: List[QuestionOutcome]


def grade_report(exam: Exam, answers: Sequence[str]) -> GradeReport:
    """Grade ``answers`` against ``exam`` and explain every question."""
    score = 0
    correct = 0
    outcomes = []

    for i, question in enumerate(exam.questions):
        submitted = answers[i] if i < len(answers) else None
        # An out-of-range correct index makes the question unwinnable,
        # it must not abort the rest of the pass.
        expected = question.correct_choice()
        is_correct = submitted is not None and expected is not None and submitted == expected
        points = question.score if is_correct else 0

        score += points
        if is_correct:
            correct += 1
        outcomes.append(QuestionOutcome(
            index=i,
            submitted=submitted,
            is_correct=is_correct,
            points_awarded=points,
        ))

    max_score = exam.max_score
    percentage = (score / max_score * 100) if max_score > 0 else 0

    return GradeReport(
        score=score,
        max_score=max_score,
        correct_count=correct,
        total_questions=len(exam.questions),
        percentage=round(percentage, 1),
        outcomes=outcomes,
    )


def grade(exam: Exam, answers: Sequence[str]) -> int:
    """Score for ``answers``: sum of points of the correctly answered questions."""
    return grade_report(exam, answers).score
