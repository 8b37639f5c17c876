import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from talentgate.core.auth import AuthUser
from talentgate.core.errors import Forbidden, NotFound
from talentgate.models.orm import ATTEMPT_IN_PROGRESS, ATTEMPT_SUBMITTED, Assessment, AssessmentAttempt
from talentgate.services import assignments
from talentgate.services.candidate_identity import candidate_id_for

logger = logging.getLogger(__name__)


def open_attempt(db: Session, assessment_id: int, candidate_id: str) -> Optional[AssessmentAttempt]:
    """Most recently started attempt of the candidate that is not submitted yet."""
    return db.scalar(
        select(AssessmentAttempt)
        .where(
            AssessmentAttempt.assessment_id == assessment_id,
            AssessmentAttempt.candidate_id == candidate_id,
            AssessmentAttempt.status != ATTEMPT_SUBMITTED,
        )
        .order_by(AssessmentAttempt.started_at.desc(), AssessmentAttempt.id.desc())
        .limit(1)
    )


def start_attempt(db: Session, assessment_id: int, identity: Optional[AuthUser]) -> AssessmentAttempt:
    """Resume the candidate's open attempt or issue a new one."""
    candidate_id = candidate_id_for(identity)
    if db.get(Assessment, assessment_id) is None:
        raise NotFound("Assessment not found")

    existing = open_attempt(db, assessment_id, candidate_id)
    if existing is not None:
        return existing

    now = datetime.now(timezone.utc)
    attempt = AssessmentAttempt(assessment_id=assessment_id, candidate_id=candidate_id, status=ATTEMPT_IN_PROGRESS, started_at=now)
    db.add(attempt)
    try:
        db.flush()
    except IntegrityError:
        # a concurrent start won the open-attempt index
        db.rollback()
        winner = open_attempt(db, assessment_id, candidate_id)
        if winner is None:
            raise
        return winner

    assignments.mark_started(db, identity, assessment_id, now)
    db.commit()
    logger.info("Started attempt %s for assessment %s", attempt.id, assessment_id)
    return attempt


def load_owned_attempt(
    db: Session, assessment_id: int, attempt_id: int, identity: Optional[AuthUser], for_update: bool = False
) -> AssessmentAttempt:
    """Fetch an attempt of this assessment that belongs to the calling candidate."""
    candidate_id = candidate_id_for(identity)
    stmt = select(AssessmentAttempt).where(AssessmentAttempt.id == attempt_id)
    if for_update:
        stmt = stmt.with_for_update()
    attempt = db.scalar(stmt)
    if attempt is None or attempt.assessment_id != assessment_id:
        raise NotFound("Attempt not found for assessment")
    if attempt.candidate_id != candidate_id:
        logger.warning("Candidate %s denied access to attempt %s", candidate_id, attempt_id)
        raise Forbidden()
    return attempt
