"""
CertHub service.

One object owns the datastore and exposes every operation of the exam and
certification platform. The caller principal is always passed in
explicitly; it is resolved upstream and trusted here. Each operation runs
inside a single datastore transaction.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from certhub.errors import InvalidInput
from certhub.models import Certificate, Exam, Level, Question, StoredQuestion, User, UserRole
from certhub.services.authorization import AuthorizationGuard
from certhub.services.certification import CertificationWorkflow, SubmissionResult
from certhub.services.demo_data import load_demo_data
from certhub.storage import Datastore, EntityKind

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def validate_question(question: Question) -> None:
    """Reject a question whose correct index does not point at a choice."""
    if not question.choices:
        raise InvalidInput("question must have at least one choice")
    if question.correct_choice() is None:
        raise InvalidInput(
            f"correct_answer_index {question.correct_answer_index} is out of range "
            f"for {len(question.choices)} choices"
        )


class CertHubService:
    """Users, exams, certificates and the category-indexed question bank."""

    def __init__(
        self,
        store: Optional[Datastore] = None,
        clock: Callable[[], datetime] = utc_now,
        bootstrap_admins: Iterable[str] = (),
    ):
        self.store = store or Datastore()
        self.clock = clock
        self.bootstrap_admins = set(bootstrap_admins)
        self.guard = AuthorizationGuard(self.store.users)
        self.certification = CertificationWorkflow(self.store, self.guard, clock)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def register_or_refresh(self, principal: str, username: str) -> User:
        """Create the caller's record on first contact, otherwise refresh last_login."""
        now = self.clock()
        with self.store.transaction():
            if self.store.users.contains(principal):
                def touch(user: User) -> None:
                    user.last_login = now
                return self.store.users.update(principal, touch)

            role = UserRole.ADMIN if principal in self.bootstrap_admins else UserRole.STUDENT
            user = User(
                principal=principal,
                username=username,
                role=role,
                created_at=now,
                last_login=now,
            )
            self.store.users.insert(principal, user)

        logger.info("Registered %s as %s (%s)", principal, username, role.value)
        return user

    def get_own_profile(self, principal: str) -> User:
        with self.store.transaction():
            return self.guard.require_registered(principal)

    def list_users(self, principal: str) -> List[User]:
        with self.store.transaction():
            self.guard.require_admin(principal)
            return self.store.users.list_all()

    def promote(self, principal: str, target: str, role: UserRole = UserRole.ADMIN) -> User:
        with self.store.transaction():
            self.guard.require_admin(principal)

            def set_role(user: User) -> None:
                user.role = role

            promoted = self.store.users.update(target, set_role)

        logger.info("%s set role of %s to %s", principal, target, role.value)
        return promoted

    # ------------------------------------------------------------------
    # Exams and certificates
    # ------------------------------------------------------------------

    def list_exams(self) -> List[Exam]:
        with self.store.transaction():
            return self.store.exams.list_all()

    def get_exam(self, exam_id: int) -> Exam:
        with self.store.transaction():
            return self.store.exams.get(exam_id)

    def submit_answers(self, principal: str, exam_id: int, answers: Sequence[str]) -> SubmissionResult:
        return self.certification.submit(principal, exam_id, answers)

    def create_exam(
        self,
        principal: str,
        title: str,
        organization_name: str,
        questions: Sequence[Question],
        level: Level,
    ) -> int:
        with self.store.transaction():
            self.guard.require_admin(principal)
            exam_id = self._insert_exam(title, organization_name, questions, level)

        logger.info("%s created exam %s (%r, %d questions)", principal, exam_id, title, len(questions))
        return exam_id

    def delete_exam(self, principal: str, exam_id: int) -> None:
        """Remove an exam. Certificates already issued for it are kept."""
        with self.store.transaction():
            self.guard.require_admin(principal)
            self.store.exams.remove(exam_id)

        logger.info("%s deleted exam %s", principal, exam_id)

    def get_certificate(self, certificate_id: int) -> Certificate:
        with self.store.transaction():
            return self.store.certificates.get(certificate_id)

    def list_own_certificates(self, principal: str) -> List[Certificate]:
        with self.store.transaction():
            user = self.guard.require_registered(principal)
            certificates = (self.store.certificates.find(cid) for cid in user.certificates)
            return [c for c in certificates if c is not None]

    def _insert_exam(
        self,
        title: str,
        organization_name: str,
        questions: Sequence[Question],
        level: Level,
    ) -> int:
        # validate everything before an id is spent
        for question in questions:
            validate_question(question)

        exam_id = self.store.ids.next_id(EntityKind.EXAM)
        self.store.exams.insert(exam_id, Exam(
            id=exam_id,
            title=title,
            organization_name=organization_name,
            questions=list(questions),
            level=level,
        ))
        return exam_id

    # ------------------------------------------------------------------
    # Question bank
    # ------------------------------------------------------------------

    def store_question(
        self,
        text: str,
        choices: Sequence[str],
        correct_answer_index: int,
        categories: Sequence[str],
        difficulty: int,
        score: int = 1,
    ) -> int:
        try:
            question = Question(
                text=text,
                choices=list(choices),
                correct_answer_index=correct_answer_index,
                score=score,
                categories=list(categories),
                difficulty=difficulty,
            )
        except ValidationError as e:
            raise InvalidInput(str(e)) from e
        with self.store.transaction():
            return self._insert_question(question)

    def get_question(self, question_id: int) -> Optional[StoredQuestion]:
        with self.store.transaction():
            return self.store.questions.find(question_id)

    def get_category_questions(self, category: str, limit: int) -> List[StoredQuestion]:
        """Up to ``limit`` questions in ``category``, in no particular order."""
        with self.store.transaction():
            ids = self.store.category_index.lookup(category, limit)
            questions = (self.store.questions.find(qid) for qid in ids)
            return [q for q in questions if q is not None]

    def list_categories(self) -> List[str]:
        with self.store.transaction():
            return self.store.category_index.categories()

    def count_category(self, category: str) -> int:
        with self.store.transaction():
            return self.store.category_index.count(category)

    def category_summary(self) -> List[Tuple[str, int]]:
        """(category, question count) pairs taken from one consistent snapshot."""
        with self.store.transaction():
            index = self.store.category_index
            return [(category, index.count(category)) for category in index.categories()]

    def delete_question(self, principal: str, question_id: int) -> None:
        with self.store.transaction():
            self.guard.require_admin(principal)
            removed = self.store.questions.remove(question_id)
            self.store.category_index.index_remove(question_id, removed.categories)

        logger.info("%s deleted question %s", principal, question_id)

    def _insert_question(self, question: Question) -> int:
        validate_question(question)

        question_id = self.store.ids.next_id(EntityKind.QUESTION)
        stored = StoredQuestion(id=question_id, **question.model_dump())
        self.store.questions.insert(question_id, stored)
        self.store.category_index.index_insert(question_id, stored.categories)
        return question_id

    # ------------------------------------------------------------------
    # Demo content
    # ------------------------------------------------------------------

    def seed_demo_data(self, path: Optional[str] = None) -> dict:
        """Load the demo exams and questions. Grants no roles."""
        data = load_demo_data(path)

        # all or nothing: reject the whole file before any id is spent
        for entry in data["exams"]:
            for question in entry["questions"]:
                validate_question(question)
        for question in data["questions"]:
            validate_question(question)

        with self.store.transaction():
            exam_ids = [
                self._insert_exam(e["title"], e["organization_name"], e["questions"], e["level"])
                for e in data["exams"]
            ]
            question_ids = [self._insert_question(q) for q in data["questions"]]

        logger.info("Seeded %d demo exams and %d demo questions", len(exam_ids), len(question_ids))
        return {"exam_ids": exam_ids, "question_ids": question_ids}
