from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from talentgate.core.config import settings
from talentgate.core.errors import Unauthorized


class AuthUser(BaseModel):
    """Identity resolved by the auth provider; passed explicitly into services."""
    id: str
    email: str


bearer = HTTPBearer(auto_error=False)


def create_token(user_id: str, email: str, ttl_minutes: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    ttl = ttl_minutes if ttl_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    payload = {"sub": user_id, "email": email, "iat": int(now.timestamp()), "exp": int((now + timedelta(minutes=ttl)).timestamp())}
    return jwt.encode(payload, settings.SECRET_KEY.get_secret_value(), algorithm=settings.ALGORITHM)


def get_current_user(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> AuthUser:
    if creds is None:
        raise Unauthorized()
    try:
        payload = jwt.decode(creds.credentials, settings.SECRET_KEY.get_secret_value(), algorithms=[settings.ALGORITHM])
    except jwt.PyJWTError:
        raise Unauthorized("Invalid or expired token")
    email = payload.get("email")
    if not email:
        raise Unauthorized()
    return AuthUser(id=str(payload.get("sub") or email), email=str(email))
