import json
import re
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from talentgate.core.auth import AuthUser
from talentgate.core.errors import Conflict
from talentgate.models.orm import ATTEMPT_IN_PROGRESS, ATTEMPT_SUBMITTED, Assessment, AssessmentQuestion
from talentgate.services.attempts import load_owned_attempt

_HOURS = re.compile(r"(\d+)\s*(hours|hour|hrs|hr)\b", re.I)
_MINUTES = re.compile(r"(\d+)\s*(minutes|minute|mins|min)\b", re.I)
_NUMBER = re.compile(r"(\d+)")


def parse_duration_seconds(text: Optional[str]) -> Optional[int]:
    """'30 min', '1 hour', '1 hr 15 mins' -> seconds; a bare number means minutes."""
    if not text:
        return None
    s = str(text).lower()
    h = _HOURS.search(s)
    m = _MINUTES.search(s)
    sec = 0
    if h:
        sec += int(h.group(1)) * 3600
    if m:
        sec += int(m.group(1)) * 60
    if not h and not m:
        n = _NUMBER.search(s)
        if n:
            sec += int(n.group(1)) * 60
    return sec or None


def _options(raw: Any) -> Any:
    if isinstance(raw, str):
        try:
            return json.loads(raw)
        except ValueError:
            return raw
    return raw


def get_attempt_questions(db: Session, assessment_id: int, attempt_id: int, identity: Optional[AuthUser]) -> Dict[str, Any]:
    """Candidate-side question list for an open attempt (no correct answers)."""
    attempt = load_owned_attempt(db, assessment_id, attempt_id, identity)
    if attempt.status == ATTEMPT_SUBMITTED:
        raise Conflict("Attempt already submitted")

    questions = db.scalars(
        select(AssessmentQuestion)
        .where(AssessmentQuestion.assessment_id == assessment_id)
        .order_by(AssessmentQuestion.order_index.is_(None), AssessmentQuestion.order_index, AssessmentQuestion.id)
    ).all()
    assessment = db.get(Assessment, assessment_id)

    return {
        "questions": [
            {
                "id": q.id,
                "prompt": q.prompt,
                "kind": q.kind or "short",
                "optionsJson": _options(q.options_json),
                "orderIndex": q.order_index,
            }
            for q in questions
        ],
        "meta": {
            "title": assessment.title if assessment else "Assessment",
            "durationSec": parse_duration_seconds(assessment.duration if assessment else None),
            "startedAt": attempt.started_at.isoformat() if attempt.started_at else None,
            "attemptStatus": attempt.status or ATTEMPT_IN_PROGRESS,
        },
    }
