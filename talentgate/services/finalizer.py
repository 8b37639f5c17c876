"""
Submission: the only in_progress -> submitted transition.

Final answers come from the request body, falling back to the stored draft
for any question the body leaves out. All answer rows of the attempt are
replaced by the scored final set and the attempt is closed in one
transaction.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Union

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from talentgate.core.auth import AuthUser
from talentgate.core.errors import Conflict
from talentgate.models.answers import RawAnswer, StructuredAnswer, answer_from_payload
from talentgate.models.orm import ATTEMPT_SUBMITTED, AssessmentAnswer, AssessmentQuestion
from talentgate.services import assignments
from talentgate.services.attempts import load_owned_attempt

logger = logging.getLogger(__name__)

GRADED_KINDS = {"mcq"}


def score_answer(question: AssessmentQuestion, response: Union[RawAnswer, StructuredAnswer]) -> Optional[float]:
    """1/0 for gradable kinds, None for kinds that need a human reviewer."""
    if (question.kind or "short") not in GRADED_KINDS:
        return None
    if question.correct_answer is None:
        return 0.0
    choice = response.choice()
    if choice is None:
        return 0.0
    return 1.0 if str(choice).strip() == str(question.correct_answer).strip() else 0.0


def submit_attempt(
    db: Session,
    assessment_id: int,
    attempt_id: int,
    answers: Mapping[int, Union[RawAnswer, StructuredAnswer]],
    identity: Optional[AuthUser],
) -> Dict[str, Any]:
    attempt = load_owned_attempt(db, assessment_id, attempt_id, identity, for_update=True)
    if attempt.status == ATTEMPT_SUBMITTED:
        logger.warning("Rejected resubmission of attempt %s", attempt_id)
        raise Conflict("Attempt already submitted")

    questions = db.scalars(
        select(AssessmentQuestion)
        .where(AssessmentQuestion.assessment_id == attempt.assessment_id)
        .order_by(AssessmentQuestion.order_index.is_(None), AssessmentQuestion.order_index, AssessmentQuestion.id)
    ).all()
    drafts = {
        row.question_id: answer_from_payload(row.response_json)
        for row in db.scalars(select(AssessmentAnswer).where(AssessmentAnswer.attempt_id == attempt.id))
    }

    score = 0
    total_possible = 0
    submitted_at = datetime.now(timezone.utc)
    try:
        db.execute(
            delete(AssessmentAnswer)
            .where(AssessmentAnswer.attempt_id == attempt.id)
            .execution_options(synchronize_session=False)
        )
        for q in questions:
            response = answers.get(q.id) or drafts.get(q.id)
            if response is None or response.is_empty():
                continue
            auto_score = score_answer(q, response)
            if (q.kind or "short") in GRADED_KINDS:
                total_possible += 1
                score += int(auto_score or 0)
            db.add(AssessmentAnswer(attempt_id=attempt.id, question_id=q.id, response_json=response.to_payload(), auto_score=auto_score))

        auto_score_total = float(score) / float(total_possible) if total_possible > 0 else None
        attempt.status = ATTEMPT_SUBMITTED
        attempt.submitted_at = submitted_at
        attempt.score = score
        attempt.total_possible = total_possible
        attempt.auto_score_total = auto_score_total
        assignments.mark_completed(db, identity, assessment_id, submitted_at, score)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info("Submitted attempt %s: %s/%s", attempt_id, score, total_possible)
    return {
        "score": score,
        "totalPossible": total_possible,
        "autoScoreTotal": auto_score_total,
        "submittedAt": submitted_at,
    }
