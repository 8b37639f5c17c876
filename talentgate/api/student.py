from typing import List, Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from talentgate.core.auth import AuthUser, get_current_user
from talentgate.core.database import get_db
from talentgate.services.assignments import list_student_assessments

router = APIRouter()


class AssignedAssessment(BaseModel):
    id: int
    title: str
    orgName: Optional[str] = None
    status: Literal["assigned", "in_progress", "completed"]
    attemptId: Optional[int] = None


@router.get("/assessments", response_model=List[AssignedAssessment])
def my_assessments(user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return list_student_assessments(db, user)
