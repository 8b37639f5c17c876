"""
Deterministic candidate ids.

Candidates do not need a UUID-typed account row: the attempt tables key them by
an RFC 4122 version-5 UUID derived from their email (SHA-1 over the namespace
bytes followed by the UTF-8 email). Every place that needs to match attempts
to a person derives the id the same way.
"""
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from talentgate.core.auth import AuthUser
from talentgate.core.config import settings
from talentgate.core.errors import Unauthorized
from talentgate.models.orm import User


def candidate_uuid(email: str, namespace: Optional[str] = None) -> str:
    ns = uuid.UUID(namespace or settings.CANDIDATE_NAMESPACE)
    return str(uuid.uuid5(ns, str(email)))


def candidate_id_for(identity: Optional[AuthUser]) -> str:
    if identity is None or not identity.email:
        raise Unauthorized()
    return candidate_uuid(identity.email)


def find_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.scalar(select(User).where(User.email == email).limit(1))
