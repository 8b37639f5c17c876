from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from talentgate.core.auth import create_token
from talentgate.core.config import settings
from talentgate.core.errors import NotFound

router = APIRouter()


class MockLogin(BaseModel):
    email: str = Field(min_length=3)
    user_id: Optional[str] = None


@router.post("/mock-login")
def mock_login(payload: MockLogin):
    if not settings.ENABLE_MOCK_LOGIN or settings.is_production():
        raise NotFound()
    token = create_token(payload.user_id or payload.email, payload.email)
    return {"access_token": token, "token_type": "bearer", "email": payload.email}
