"""
Application assessment assignments (application_assessments rows).

The attempt flow keeps these in step: starting an attempt moves the
candidate's assignment to in_progress, submitting moves it to completed.
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from talentgate.core.auth import AuthUser
from talentgate.core.errors import Unauthorized
from talentgate.models.orm import (
    ASSIGNMENT_ASSIGNED, ASSIGNMENT_COMPLETED, ASSIGNMENT_IN_PROGRESS,
    Application, ApplicationAssessment, Assessment, AssessmentAttempt, Organization,
)
from talentgate.services.candidate_identity import candidate_uuid, find_user_by_email

logger = logging.getLogger(__name__)


def application_ids_for(db: Session, email: str) -> List[int]:
    user = find_user_by_email(db, email)
    if user is None:
        return []
    return list(db.scalars(select(Application.id).where(Application.applicant_user_id == user.id)))


def mark_started(db: Session, identity: AuthUser, assessment_id: int, started_at: datetime) -> int:
    app_ids = application_ids_for(db, identity.email)
    if not app_ids:
        return 0
    res = db.execute(
        update(ApplicationAssessment)
        .where(
            ApplicationAssessment.application_id.in_(app_ids),
            ApplicationAssessment.assessment_id == assessment_id,
            ApplicationAssessment.status == ASSIGNMENT_ASSIGNED,
        )
        .values(status=ASSIGNMENT_IN_PROGRESS, started_at=started_at)
        .execution_options(synchronize_session=False)
    )
    return res.rowcount or 0


def mark_completed(db: Session, identity: AuthUser, assessment_id: int, submitted_at: datetime, score: int) -> int:
    app_ids = application_ids_for(db, identity.email)
    if not app_ids:
        return 0
    res = db.execute(
        update(ApplicationAssessment)
        .where(ApplicationAssessment.application_id.in_(app_ids), ApplicationAssessment.assessment_id == assessment_id)
        .values(status=ASSIGNMENT_COMPLETED, submitted_at=submitted_at, score=score)
        .execution_options(synchronize_session=False)
    )
    logger.info("Marked %s application assessment(s) completed for assessment %s", res.rowcount, assessment_id)
    return res.rowcount or 0


def _normalize_status(status: Optional[str]) -> str:
    if status == ASSIGNMENT_IN_PROGRESS:
        return ASSIGNMENT_IN_PROGRESS
    if status == ASSIGNMENT_COMPLETED:
        return ASSIGNMENT_COMPLETED
    return ASSIGNMENT_ASSIGNED


def list_student_assessments(db: Session, identity: Optional[AuthUser]) -> List[Dict]:
    """Assessments assigned to the caller's applications, with their latest attempt."""
    if identity is None:
        raise Unauthorized()
    user = find_user_by_email(db, identity.email)
    if user is None:
        raise Unauthorized("No app user for email")

    rows = db.execute(
        select(ApplicationAssessment.assessment_id, ApplicationAssessment.status)
        .join(Application, ApplicationAssessment.application_id == Application.id)
        .where(Application.applicant_user_id == user.id)
        .order_by(ApplicationAssessment.id)
    ).all()
    if not rows:
        return []

    assessment_ids = sorted({r.assessment_id for r in rows})
    assessments = {
        a.id: a for a in db.scalars(select(Assessment).where(Assessment.id.in_(assessment_ids)))
    }
    org_ids = {a.org_id for a in assessments.values() if a.org_id}
    org_names = dict(db.execute(select(Organization.id, Organization.name).where(Organization.id.in_(org_ids))).all()) if org_ids else {}

    candidate_id = candidate_uuid(identity.email)
    latest: Dict[int, int] = {}
    for assessment_id, attempt_id in db.execute(
        select(AssessmentAttempt.assessment_id, AssessmentAttempt.id)
        .where(AssessmentAttempt.candidate_id == candidate_id, AssessmentAttempt.assessment_id.in_(assessment_ids))
        .order_by(AssessmentAttempt.id)
    ):
        latest[assessment_id] = attempt_id

    out = []
    for r in rows:
        a = assessments.get(r.assessment_id)
        out.append({
            "id": r.assessment_id,
            "title": a.title if a else f"Assessment #{r.assessment_id}",
            "orgName": org_names.get(a.org_id) if a else None,
            "status": _normalize_status(r.status),
            "attemptId": latest.get(r.assessment_id),
        })
    return out
