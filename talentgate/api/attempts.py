from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from talentgate.core.auth import AuthUser, get_current_user
from talentgate.core.database import get_db
from talentgate.core.errors import parse_id
from talentgate.models.answers import AnswersIn
from talentgate.services import answer_store, attempts, finalizer, question_sheet, review

router = APIRouter()


class AttemptStarted(BaseModel):
    ok: bool = True
    attemptId: int
    status: str


class DraftSaved(BaseModel):
    ok: bool = True
    saved: int


class AttemptSubmitted(BaseModel):
    ok: bool = True
    score: int
    totalPossible: int
    autoScoreTotal: Optional[float] = None
    submittedAt: datetime


class ReviewRow(BaseModel):
    question: Optional[str] = None
    kind: Optional[str] = None
    correctAnswer: Optional[str] = None
    response: Any = None
    autoScore: Optional[float] = None


class RosterRow(BaseModel):
    id: int
    candidateId: str
    candidateName: Optional[str] = None
    candidateEmail: Optional[str] = None
    status: str
    submittedAt: Optional[datetime] = None
    autoScoreTotal: Optional[float] = None


class SheetQuestion(BaseModel):
    id: int
    prompt: str
    kind: str
    optionsJson: Any = None
    orderIndex: Optional[int] = None


class SheetMeta(BaseModel):
    title: str
    durationSec: Optional[int] = None
    startedAt: Optional[str] = None
    attemptStatus: str


class QuestionSheet(BaseModel):
    questions: List[SheetQuestion]
    meta: SheetMeta


@router.post("/{assessment_id}/attempts/start", response_model=AttemptStarted)
def start_attempt(assessment_id: str, user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    aid = parse_id(assessment_id, "assessment id")
    attempt = attempts.start_attempt(db, aid, user)
    return AttemptStarted(attemptId=attempt.id, status=attempt.status)


@router.post("/{assessment_id}/attempts/{attempt_id}/save", response_model=DraftSaved)
def save_draft(
    assessment_id: str, attempt_id: str,
    payload: Optional[AnswersIn] = None,
    user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db),
):
    aid, atid = parse_id(assessment_id, "assessment id"), parse_id(attempt_id, "attempt id")
    saved = answer_store.save_draft(db, aid, atid, (payload or AnswersIn()).by_question_id(), user)
    return DraftSaved(saved=saved)


@router.post("/{assessment_id}/attempts/{attempt_id}/submit", response_model=AttemptSubmitted)
def submit_attempt(
    assessment_id: str, attempt_id: str,
    payload: Optional[AnswersIn] = None,
    user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db),
):
    aid, atid = parse_id(assessment_id, "assessment id"), parse_id(attempt_id, "attempt id")
    result = finalizer.submit_attempt(db, aid, atid, (payload or AnswersIn()).by_question_id(), user)
    return AttemptSubmitted(**result)


@router.get("/{assessment_id}/attempts/{attempt_id}/questions", response_model=QuestionSheet)
def attempt_questions(assessment_id: str, attempt_id: str, user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    aid, atid = parse_id(assessment_id, "assessment id"), parse_id(attempt_id, "attempt id")
    return question_sheet.get_attempt_questions(db, aid, atid, user)


@router.get("/{assessment_id}/attempts/{attempt_id}/review", response_model=List[ReviewRow])
def attempt_review(assessment_id: str, attempt_id: str, user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    aid, atid = parse_id(assessment_id, "assessment id"), parse_id(attempt_id, "attempt id")
    return review.get_review(db, aid, atid, user)


@router.get("/{assessment_id}/attempts/list", response_model=List[RosterRow])
def attempt_roster(assessment_id: str, user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return review.list_attempts(db, parse_id(assessment_id, "assessment id"), user)
