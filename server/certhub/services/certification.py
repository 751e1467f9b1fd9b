"""
Certification Workflow.

Turns a graded submission into a persisted Certificate linked to the user
who earned it. The whole sequence runs inside one datastore transaction,
so no other operation can see a certificate id that was allocated but not
stored, or a certificate that is not yet on its owner's record.
"""
import logging
from datetime import datetime
from typing import Callable, Sequence

from pydantic import BaseModel

from certhub.errors import NotFound
from certhub.models import Certificate, User
from certhub.services.authorization import AuthorizationGuard
from certhub.services.grading import GradeReport, grade_report
from certhub.storage import Datastore, EntityKind

logger = logging.getLogger(__name__)


class SubmissionResult(BaseModel):
    certificate: Certificate
    report: GradeReport


class CertificationWorkflow:

    def __init__(self, store: Datastore, guard: AuthorizationGuard, clock: Callable[[], datetime]):
        self.store = store
        self.guard = guard
        self.clock = clock

    def submit(self, principal: str, exam_id: int, answers: Sequence[str]) -> SubmissionResult:
        """
        Grade ``answers`` for ``exam_id`` and issue a certificate to ``principal``.

        The caller check and the exam lookup happen before a certificate id is
        allocated, so a refused or misdirected submission leaves the
        certificate counter untouched. Retakes are unlimited.
        """
        with self.store.transaction():
            self.guard.require_registered(principal)
            exam = self.store.exams.get(exam_id)

            report = grade_report(exam, answers)

            cert_id = self.store.ids.next_id(EntityKind.CERTIFICATE)
            certificate = Certificate(
                id=cert_id,
                exam_id=exam.id,
                user_principal=principal,
                score=report.score,
                awarded_at=self.clock(),
            )
            self.store.certificates.insert(cert_id, certificate)

            def link(user: User) -> None:
                user.certificates.append(cert_id)

            try:
                self.store.users.update(principal, link)
            except NotFound:
                # Users are never removed, but keep the pair consistent if
                # that ever changes. The id stays consumed.
                self.store.certificates.remove(cert_id)
                raise

        logger.info(
            "Issued certificate %s to %s for exam %s (score %s/%s)",
            cert_id, principal, exam.id, report.score, report.max_score,
        )
        return SubmissionResult(certificate=certificate, report=report)
