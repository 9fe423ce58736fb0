"""
Admissions Repository

Database operations for admissions. Functions here never commit: the
workflow writes the admission, its audit entry and its notification in one
transaction and commits once.

The only way workflow fields change is transition_status(), a conditional
UPDATE that succeeds only while the stored status is still one of the
expected source statuses.
"""

from collections.abc import Iterable
from typing import Any
from uuid import UUID

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Admission, AdmissionStatus, Course, FinalStatus
from .schemas import AdmissionCreate

MAX_PAGE_SIZE = 100


async def create(db: AsyncSession, data: AdmissionCreate, documents: dict[str, str]) -> Admission:
    """Add a new admission at SUBMITTED and flush it to get its id."""

    admission = Admission(
        **data.model_dump(),
        **documents,
        status=AdmissionStatus.SUBMITTED,
    )

    db.add(admission)
    await db.flush()
    await db.refresh(admission)

    return admission


async def get_active_by_id(
    db: AsyncSession,
    id: UUID,
    statuses: Iterable[AdmissionStatus] | None = None,
) -> Admission | None:
    """
    Get a non-deleted admission by id.

    Args:
        db: Database session
        id: Admission UUID
        statuses: If given, only match an admission currently in one of these

    Returns:
        The admission, or None if no active admission matches
    """
    query = select(Admission).where(Admission.id == id, Admission.is_deleted.is_(False))
    if statuses is not None:
        query = query.where(Admission.status.in_(list(statuses)))

    result = await db.execute(query)
    return result.scalar_one_or_none()


async def find_active_by_contact(db: AsyncSession, email: str, mobile: str) -> list[Admission]:
    """Get non-deleted admissions using this email (case-insensitive) or mobile."""
    result = await db.execute(
        select(Admission).where(
            Admission.is_deleted.is_(False),
            or_(
                func.lower(Admission.email) == email.lower(),
                Admission.mobile == mobile,
            ),
        )
    )
    return list(result.scalars().all())


async def transition_status(
    db: AsyncSession,
    id: UUID,
    sources: Iterable[AdmissionStatus],
    **values: Any,
) -> Admission | None:
    """
    Compare-and-swap update of an admission's workflow fields.

    Runs UPDATE ... WHERE id = :id AND is_deleted = false AND status IN (:sources)
    RETURNING *, so of two concurrent callers expecting the same source
    status only one gets a row back.

    Args:
        db: Database session
        id: Admission UUID
        sources: Statuses the admission must still be in
        **values: Columns to set (status, final_status, is_deleted, ...)

    Returns:
        The updated admission, or None if it was no longer in a source status
    """
    stmt = (
        update(Admission)
        .where(
            Admission.id == id,
            Admission.is_deleted.is_(False),
            Admission.status.in_(list(sources)),
        )
        .values(**values)
        .returning(Admission)
        .execution_options(populate_existing=True, synchronize_session=False)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def list_admissions(
    db: AsyncSession,
    *,
    course: Course | None = None,
    status: AdmissionStatus | None = None,
    final_status: FinalStatus | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[Admission], int]:
    """
    Get non-deleted admissions with filters and pagination.

    Args:
        db: Database session
        course: Only this course (forced for TEACHER principals)
        status: Filter by workflow status
        final_status: Filter by final outcome
        skip: Number of records to skip
        limit: Maximum records to return (capped at 100)

    Returns:
        Tuple of (admissions, total count matching filters), newest first
    """
    query = select(Admission).where(Admission.is_deleted.is_(False))

    if course is not None:
        query = query.where(Admission.course == course)
    if status is not None:
        query = query.where(Admission.status == status)
    if final_status is not None:
        query = query.where(Admission.final_status == final_status)

    count_query = select(func.count()).select_from(query.subquery())
    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    limit = max(1, min(limit, MAX_PAGE_SIZE))
    query = query.order_by(Admission.created_at.desc()).offset(max(skip, 0)).limit(limit)

    result = await db.execute(query)
    return list(result.scalars().all()), total
