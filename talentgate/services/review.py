"""
Organization-side reads: the per-attempt review and the attempt roster.

Both require the caller to map to an app user holding a membership in the
organization that owns the assessment.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from talentgate.core.auth import AuthUser
from talentgate.core.errors import Forbidden, NotFound, Unauthorized
from talentgate.models.orm import (
    Application, ApplicationAssessment, Assessment, AssessmentAnswer, AssessmentAttempt, AssessmentQuestion, Membership,
)
from talentgate.services.candidate_identity import candidate_uuid, find_user_by_email


def require_org_member(db: Session, assessment_id: int, identity: Optional[AuthUser]) -> Assessment:
    if identity is None:
        raise Unauthorized()
    user = find_user_by_email(db, identity.email)
    if user is None:
        raise Forbidden("No app user")
    assessment = db.get(Assessment, assessment_id)
    if assessment is None:
        raise NotFound("Assessment not found")
    member = db.scalar(
        select(Membership.id).where(Membership.org_id == assessment.org_id, Membership.user_id == user.id).limit(1)
    )
    if member is None:
        raise Forbidden()
    return assessment


def get_review(db: Session, assessment_id: int, attempt_id: int, identity: Optional[AuthUser]) -> List[Dict[str, Any]]:
    require_org_member(db, assessment_id, identity)
    attempt = db.get(AssessmentAttempt, attempt_id)
    if attempt is None or attempt.assessment_id != assessment_id:
        raise NotFound("Attempt not found for assessment")

    rows = db.execute(
        select(
            AssessmentQuestion.prompt,
            AssessmentQuestion.kind,
            AssessmentQuestion.correct_answer,
            AssessmentAnswer.response_json,
            AssessmentAnswer.auto_score,
        )
        .select_from(AssessmentAnswer)
        .outerjoin(AssessmentQuestion, AssessmentAnswer.question_id == AssessmentQuestion.id)
        .where(AssessmentAnswer.attempt_id == attempt_id)
        .order_by(
            AssessmentQuestion.order_index.is_(None),
            AssessmentQuestion.order_index,
            AssessmentAnswer.question_id,
            AssessmentAnswer.id,
        )
    ).all()
    return [
        {"question": r.prompt, "kind": r.kind, "correctAnswer": r.correct_answer, "response": r.response_json, "autoScore": r.auto_score}
        for r in rows
    ]


def list_attempts(db: Session, assessment_id: int, identity: Optional[AuthUser]) -> List[Dict[str, Any]]:
    """Every attempt of the assessment, with applicant name/email where the candidate id matches."""
    require_org_member(db, assessment_id, identity)
    attempts = db.scalars(
        select(AssessmentAttempt).where(AssessmentAttempt.assessment_id == assessment_id).order_by(AssessmentAttempt.id)
    ).all()

    applicants = db.execute(
        select(Application.applicant_name, Application.applicant_email)
        .join(ApplicationAssessment, ApplicationAssessment.application_id == Application.id)
        .where(ApplicationAssessment.assessment_id == assessment_id)
        .distinct()
    ).all()
    by_candidate = {}
    for name, email in applicants:
        if email:
            by_candidate[candidate_uuid(email)] = (name, email)

    out = []
    for t in attempts:
        name, email = by_candidate.get(t.candidate_id, (None, None))
        out.append({
            "id": t.id,
            "candidateId": t.candidate_id,
            "candidateName": name,
            "candidateEmail": email,
            "status": t.status,
            "submittedAt": t.submitted_at,
            "autoScoreTotal": t.auto_score_total,
        })
    return out
