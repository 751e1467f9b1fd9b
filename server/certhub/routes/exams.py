from fastapi import APIRouter, Depends
from typing import List

from certhub.deps import get_caller, get_service
from certhub.models import Certificate, Exam
from certhub.schemas import (
    CreateExamRequest,
    CreateExamResponse,
    MessageResponse,
    SubmitAnswersRequest,
    SubmitAnswersResponse,
)
from certhub.services.platform import CertHubService

router = APIRouter(tags=["Exams"])


@router.get("", response_model=List[Exam])
def list_exams(service: CertHubService = Depends(get_service)):
    """All exams, no registration needed"""
    return service.list_exams()


@router.post("", response_model=CreateExamResponse)
def create_exam(
    request: CreateExamRequest,
    caller: str = Depends(get_caller),
    service: CertHubService = Depends(get_service),
):
    """
    Create an exam (admin only).
    Every question's correct_answer_index must point at one of its choices.
    """
    exam_id = service.create_exam(
        caller,
        request.title,
        request.organization_name,
        request.questions,
        request.level,
    )
    return {"exam_id": exam_id}


@router.get("/certificates/{certificate_id}", response_model=Certificate)
def get_certificate(certificate_id: int, service: CertHubService = Depends(get_service)):
    """Public certificate lookup, e.g. to verify a certificate someone shared"""
    return service.get_certificate(certificate_id)


@router.get("/{exam_id}", response_model=Exam)
def get_exam(exam_id: int, service: CertHubService = Depends(get_service)):
    return service.get_exam(exam_id)


@router.delete("/{exam_id}", response_model=MessageResponse)
def delete_exam(
    exam_id: int,
    caller: str = Depends(get_caller),
    service: CertHubService = Depends(get_service),
):
    """
    Delete an exam (admin only).
    Certificates already issued for it are kept.
    """
    service.delete_exam(caller, exam_id)
    return {"success": True, "message": f"Exam {exam_id} deleted"}


@router.post("/{exam_id}/submit", response_model=SubmitAnswersResponse)
def submit_answers(
    exam_id: int,
    request: SubmitAnswersRequest,
    caller: str = Depends(get_caller),
    service: CertHubService = Depends(get_service),
):
    """
    Registered user submits answers; every submission is graded and earns a
    certificate carrying the score. Retakes are allowed.
    """
    result = service.submit_answers(caller, exam_id, request.answers)
    return {
        "score": result.certificate.score,
        "certificate_id": result.certificate.id,
        "certificate": result.certificate,
        "report": result.report,
    }
