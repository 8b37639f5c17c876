import logging
from typing import Mapping, Optional, Union

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from talentgate.core.auth import AuthUser
from talentgate.core.errors import Conflict
from talentgate.models.answers import RawAnswer, StructuredAnswer
from talentgate.models.orm import ATTEMPT_SUBMITTED, AssessmentAnswer
from talentgate.services.attempts import load_owned_attempt

logger = logging.getLogger(__name__)


def save_draft(
    db: Session,
    assessment_id: int,
    attempt_id: int,
    answers: Mapping[int, Union[RawAnswer, StructuredAnswer]],
    identity: Optional[AuthUser],
) -> int:
    """Replace the stored drafts for the given questions; returns rows written.

    Drafts are never scored here, auto_score stays null until submission.
    """
    attempt = load_owned_attempt(db, assessment_id, attempt_id, identity, for_update=True)
    if attempt.status == ATTEMPT_SUBMITTED:
        logger.warning("Rejected draft save on submitted attempt %s", attempt_id)
        raise Conflict("Attempt already submitted")

    qids = sorted(answers)
    if not qids:
        return 0

    rows = [
        AssessmentAnswer(attempt_id=attempt.id, question_id=qid, response_json=answers[qid].to_payload(), auto_score=None)
        for qid in qids
    ]
    try:
        db.execute(
            delete(AssessmentAnswer)
            .where(AssessmentAnswer.attempt_id == attempt.id, AssessmentAnswer.question_id.in_(qids))
            .execution_options(synchronize_session=False)
        )
        db.add_all(rows)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    return len(rows)
