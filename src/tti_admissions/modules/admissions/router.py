"""
Admissions Router

API endpoints for candidate submission and the review workflow.

Endpoints:
- POST /admissions - Submit an application (multipart, public)
- PUT /admissions/{id}/head-approve - HEAD forwards to the course teacher
- PUT /admissions/{id}/head-reject - HEAD rejects
- PUT /admissions/{id}/head-delete - HEAD soft-deletes
- POST /admissions/{id}/schedule-interview - TEACHER schedules the interview
- PUT /admissions/{id}/final-approve - TEACHER selects
- PUT /admissions/{id}/final-reject - TEACHER rejects
- GET /admissions - List active admissions (TEACHER: own course only)
- GET /admissions/views/{view} - Named dashboard lists
- GET /admissions/{id} - Application detail with available actions

Security:
- Transition endpoints authenticate the caller; who may do what is decided
  by the transition guard, not by the route
- Transition endpoints are rate limited per principal
- Outward notification failures are returned as warnings with a 2xx response
"""

import logging
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from tti_admissions.core.auth import Principal, get_current_principal
from tti_admissions.core.database import get_db
from tti_admissions.core.rate_limit import action_rate_limit, decision_rate_limit
from tti_admissions.core.storage import InvalidDocumentError, StorageBackend, get_storage
from tti_admissions.modules.admissions import service
from tti_admissions.modules.admissions.errors import AdmissionServiceError
from tti_admissions.modules.admissions.models import (
    AdmissionStatus,
    Course,
    FinalStatus,
    Gender,
    SkillLevel,
)
from tti_admissions.modules.admissions.schemas import (
    DOCUMENT_FIELDS,
    AdmissionCreate,
    AdmissionDetailResponse,
    AdmissionListResponse,
    DecisionBody,
    DeleteBody,
    DeliveryStatus,
    FinalApprove,
    FinalReject,
    HeadApprove,
    HeadReject,
    InterviewBody,
    ScheduleInterview,
    SoftDelete,
    SubmissionResponse,
    TransitionRequest,
    TransitionResponse,
)
from tti_admissions.modules.admissions.service import AdmissionWorkflow, get_workflow
from tti_admissions.modules.notifications.dispatcher import Channel

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================
# Helper Functions
# ============================================


def _handle_service_error(e: AdmissionServiceError) -> None:
    """Convert service errors to HTTPExceptions."""
    raise HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
    )


def _internal_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )


def _validation_error(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": "VALIDATION_ERROR", "message": message},
    )


async def _run_transition(
    db: AsyncSession,
    workflow: AdmissionWorkflow,
    admission_id: UUID,
    principal: Principal,
    request: TransitionRequest,
    message: str,
) -> TransitionResponse:
    try:
        result = await workflow.apply_transition(db, admission_id, principal, request)
    except AdmissionServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Error applying {request.action.value} to {admission_id}: {e}")
        raise _internal_error() from e

    application = result.application
    return TransitionResponse(
        id=application.id,
        action=request.action,
        status=application.status,
        final_status=application.final_status,
        decision_done=application.decision_done,
        is_deleted=application.is_deleted,
        audit_log_id=result.audit_log.id,
        notification_id=result.notification.id,
        deliveries=[DeliveryStatus.from_result(d) for d in result.deliveries],
        warnings=result.warnings,
        message=message,
    )


# ============================================
# Submission
# ============================================


@router.post(
    "",
    response_model=SubmissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Admission",
    description="""
Submit an admission application with its documents.

**Required files:** passport_photo, id_proof, udid, disability_certificate,
degree_memo, medical_certificate (jpg, jpeg, png, pdf or webp).

Email and mobile must not belong to another active application.
""",
    responses={
        400: {"description": "Validation error - missing/invalid fields or documents"},
        409: {"description": "An application with this email or mobile already exists"},
    },
)
async def submit_admission(
    name: str = Form(...),
    email: str = Form(...),
    mobile: str = Form(...),
    dob: date = Form(...),
    gender: Gender = Form(...),
    state: str = Form(...),
    district: str = Form(...),
    disability_status: str = Form(...),
    education: str = Form(...),
    enrolled_course: str = Form(""),
    course: Course = Form(...),
    basic_computer_knowledge: SkillLevel = Form(...),
    basic_english_skills: SkillLevel = Form(...),
    screen_reader: SkillLevel = Form(...),
    rules_declaration: bool = Form(False),
    passport_photo: UploadFile | None = File(None),
    id_proof: UploadFile | None = File(None),
    udid: UploadFile | None = File(None),
    disability_certificate: UploadFile | None = File(None),
    degree_memo: UploadFile | None = File(None),
    medical_certificate: UploadFile | None = File(None),
    db: AsyncSession = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
    workflow: AdmissionWorkflow = Depends(get_workflow),
) -> SubmissionResponse:
    """Submit an admission."""
    try:
        data = AdmissionCreate(
            name=name,
            email=email,
            mobile=mobile,
            dob=dob,
            gender=gender,
            state=state,
            district=district,
            disability_status=disability_status,
            education=education,
            enrolled_course=enrolled_course,
            course=course,
            basic_computer_knowledge=basic_computer_knowledge,
            basic_english_skills=basic_english_skills,
            screen_reader=screen_reader,
            rules_declaration=rules_declaration,
        )
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise _validation_error(f"{location}: {first['msg']}" if location else first["msg"]) from e

    uploads = {
        "passport_photo": passport_photo,
        "id_proof": id_proof,
        "udid": udid,
        "disability_certificate": disability_certificate,
        "degree_memo": degree_memo,
        "medical_certificate": medical_certificate,
    }
    missing = [
        field for field in DOCUMENT_FIELDS if uploads[field] is None or not uploads[field].filename
    ]
    if missing:
        raise _validation_error(f"Missing required documents: {', '.join(missing)}.")

    stored: dict[str, str] = {}
    try:
        for field in DOCUMENT_FIELDS:
            upload = uploads[field]
            path, _ = await storage.save(await upload.read(), upload.filename, subdir=field)
            stored[field] = path

        result = await workflow.submit_application(db, data, stored)
    except InvalidDocumentError as e:
        await _discard(storage, stored)
        raise _validation_error(str(e)) from e
    except AdmissionServiceError as e:
        await _discard(storage, stored)
        _handle_service_error(e)
    except Exception as e:
        await _discard(storage, stored)
        logger.exception(f"Error submitting admission: {e}")
        raise _internal_error() from e

    email_results = [d for d in result.deliveries if d.channel == Channel.EMAIL]
    candidate_email_sent = bool(email_results) and email_results[0].delivered
    head_email_sent = len(email_results) > 1 and email_results[1].delivered

    return SubmissionResponse(
        id=result.application.id,
        status=result.application.status,
        candidate_email_sent=candidate_email_sent,
        head_email_sent=head_email_sent,
        deliveries=[DeliveryStatus.from_result(d) for d in result.deliveries],
        warnings=result.warnings,
    )


async def _discard(storage: StorageBackend, stored: dict[str, str]) -> None:
    """Remove documents saved for a submission that didn't go through."""
    for path in stored.values():
        try:
            await storage.delete(path)
        except OSError as e:
            logger.error(f"Failed to remove orphaned document {path}: {e}")


# ============================================
# Transitions
# ============================================


@router.put(
    "/{admission_id}/head-approve",
    response_model=TransitionResponse,
    summary="Head Approve",
    dependencies=[Depends(decision_rate_limit)],
    responses={
        400: {"description": "No teacher configured for the course"},
        403: {"description": "Only HEAD may approve"},
        404: {"description": "No SUBMITTED application with this id"},
    },
)
async def head_approve(
    admission_id: UUID,
    body: DecisionBody | None = None,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    workflow: AdmissionWorkflow = Depends(get_workflow),
) -> TransitionResponse:
    request = HeadApprove(note=body.note if body else None)
    return await _run_transition(
        db, workflow, admission_id, principal, request, "Head approved and Teacher notified."
    )


@router.put(
    "/{admission_id}/head-reject",
    response_model=TransitionResponse,
    summary="Head Reject",
    dependencies=[Depends(decision_rate_limit)],
    responses={
        403: {"description": "Only HEAD may reject"},
        404: {"description": "No SUBMITTED application with this id"},
    },
)
async def head_reject(
    admission_id: UUID,
    body: DecisionBody | None = None,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    workflow: AdmissionWorkflow = Depends(get_workflow),
) -> TransitionResponse:
    request = HeadReject(note=body.note if body else None)
    return await _run_transition(
        db, workflow, admission_id, principal, request, "Application rejected."
    )


@router.put(
    "/{admission_id}/head-delete",
    response_model=TransitionResponse,
    summary="Head Delete",
    description="Soft-delete an application. Its audit trail is kept.",
    dependencies=[Depends(action_rate_limit)],
    responses={
        403: {"description": "Only HEAD may delete"},
        404: {"description": "Application not found or already deleted"},
    },
)
async def head_delete(
    admission_id: UUID,
    body: DeleteBody | None = None,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    workflow: AdmissionWorkflow = Depends(get_workflow),
) -> TransitionResponse:
    request = SoftDelete(
        reason=body.reason if body else None,
        note=body.note if body else None,
    )
    return await _run_transition(
        db, workflow, admission_id, principal, request, "Application deleted successfully."
    )


@router.post(
    "/{admission_id}/schedule-interview",
    response_model=TransitionResponse,
    summary="Schedule Interview",
    dependencies=[Depends(action_rate_limit)],
    responses={
        400: {"description": "Missing or invalid interview details"},
        403: {"description": "Only the course TEACHER may schedule"},
        404: {"description": "No HEAD_ACCEPTED application with this id"},
    },
)
async def schedule_interview(
    admission_id: UUID,
    body: InterviewBody,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    workflow: AdmissionWorkflow = Depends(get_workflow),
) -> TransitionResponse:
    request = ScheduleInterview(**body.model_dump())
    return await _run_transition(
        db, workflow, admission_id, principal, request, "Interview scheduled & mail sent."
    )


@router.put(
    "/{admission_id}/final-approve",
    response_model=TransitionResponse,
    summary="Final Approve",
    dependencies=[Depends(decision_rate_limit)],
    responses={
        403: {"description": "Only the course TEACHER may decide"},
        404: {"description": "No INTERVIEW_SCHEDULED application with this id"},
    },
)
async def final_approve(
    admission_id: UUID,
    body: DecisionBody | None = None,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    workflow: AdmissionWorkflow = Depends(get_workflow),
) -> TransitionResponse:
    request = FinalApprove(note=body.note if body else None)
    return await _run_transition(
        db, workflow, admission_id, principal, request, "Final approval done & mail sent."
    )


@router.put(
    "/{admission_id}/final-reject",
    response_model=TransitionResponse,
    summary="Final Reject",
    dependencies=[Depends(decision_rate_limit)],
    responses={
        403: {"description": "Only the course TEACHER may decide"},
        404: {"description": "No INTERVIEW_SCHEDULED application with this id"},
    },
)
async def final_reject(
    admission_id: UUID,
    body: DecisionBody | None = None,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    workflow: AdmissionWorkflow = Depends(get_workflow),
) -> TransitionResponse:
    request = FinalReject(note=body.note if body else None)
    return await _run_transition(
        db, workflow, admission_id, principal, request, "Final rejection done & mail sent."
    )


# ============================================
# Read Views
# ============================================


@router.get("", response_model=AdmissionListResponse, summary="List Admissions")
async def list_admissions(
    status: AdmissionStatus | None = Query(None, description="Filter by workflow status"),
    final_status: FinalStatus | None = Query(None, description="Filter by final outcome"),
    skip: int = Query(0, ge=0, description="Records to skip"),
    limit: int = Query(20, ge=1, le=100, description="Maximum records to return"),
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> AdmissionListResponse:
    try:
        return await service.list_admissions(
            db, principal, status=status, final_status=final_status, skip=skip, limit=limit
        )
    except Exception as e:
        logger.exception(f"Error listing admissions: {e}")
        raise _internal_error() from e


@router.get(
    "/views/{view}",
    response_model=AdmissionListResponse,
    summary="Dashboard View",
    description="""
Named lists used by the dashboards:
`submitted`, `head-accepted`, `head-rejected`, `interview-required`,
`teacher-accepted`, `teacher-rejected`, `final-selected`, `final-rejected`.

Lists open to TEACHER are limited to the teacher's course.
""",
    responses={
        403: {"description": "View not available to this role"},
        404: {"description": "Unknown view"},
    },
)
async def get_view(
    view: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> AdmissionListResponse:
    try:
        return await service.get_view(db, principal, view, skip=skip, limit=limit)
    except AdmissionServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Error listing view {view}: {e}")
        raise _internal_error() from e


@router.get(
    "/{admission_id}",
    response_model=AdmissionDetailResponse,
    summary="Get Admission",
    responses={404: {"description": "Application not found"}},
)
async def get_admission(
    admission_id: UUID,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> AdmissionDetailResponse:
    try:
        return await service.get_admission(db, principal, admission_id)
    except AdmissionServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Error getting admission {admission_id}: {e}")
        raise _internal_error() from e
