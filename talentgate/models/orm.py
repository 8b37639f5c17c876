from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, BigInteger, Boolean, DateTime, Float, ForeignKey, Index, Integer, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column

from talentgate.core.database import Base

ATTEMPT_IN_PROGRESS = "in_progress"
ATTEMPT_SUBMITTED = "submitted"

# application_assessments.status
ASSIGNMENT_ASSIGNED = "assigned"
ASSIGNMENT_IN_PROGRESS = "in_progress"
ASSIGNMENT_COMPLETED = "completed"

# SQLite only autoincrements INTEGER PRIMARY KEY
PK = BigInteger().with_variant(Integer, "sqlite")

# ========== Tenancy ==========

class Organization(Base):
    __tablename__ = "organizations"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    name: Mapped[str] = mapped_column(Text)
    slug: Mapped[str] = mapped_column(String(255), unique=True)
    type: Mapped[str] = mapped_column(String(50))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())


class User(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True)
    name: Mapped[str] = mapped_column(Text)
    account_type: Mapped[str] = mapped_column(String(50), default="applicant")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())


class Membership(Base):
    __tablename__ = "memberships"
    __table_args__ = (Index("idx_memberships_org_user", "org_id", "user_id"),)
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id", ondelete="CASCADE"))
    org_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("organizations.id", ondelete="CASCADE"))
    role: Mapped[str] = mapped_column(String(50))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())

# ========== Assessments ==========

class Assessment(Base):
    __tablename__ = "assessments"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    org_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("organizations.id"), index=True)
    job_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    title: Mapped[str] = mapped_column(String(255))
    type: Mapped[str] = mapped_column(String(50), default="MCQ")
    duration: Mapped[str] = mapped_column(String(50), default="30 min")
    is_published: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())


class AssessmentQuestion(Base):
    __tablename__ = "assessment_questions"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    assessment_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("assessments.id", ondelete="CASCADE"), index=True)
    prompt: Mapped[str] = mapped_column(Text)
    kind: Mapped[str] = mapped_column(String(20), default="text")  # text | mcq | short | coding | case | voice
    options_json: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    correct_answer: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_index: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)


class AssessmentAttempt(Base):
    __tablename__ = "assessment_attempts"
    __table_args__ = (
        Index("idx_attempts_assessment_candidate", "assessment_id", "candidate_id"),
        # at most one open attempt per (assessment, candidate)
        Index(
            "uq_attempts_open", "assessment_id", "candidate_id", unique=True,
            postgresql_where=text("status = 'in_progress'"),
            sqlite_where=text("status = 'in_progress'"),
        ),
    )
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    assessment_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("assessments.id", ondelete="CASCADE"))
    candidate_id: Mapped[str] = mapped_column(String(36))
    status: Mapped[str] = mapped_column(String(20), default=ATTEMPT_IN_PROGRESS)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    total_possible: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    auto_score_total: Mapped[Optional[float]] = mapped_column(Float, nullable=True)


class AssessmentAnswer(Base):
    __tablename__ = "assessment_answers"
    __table_args__ = (Index("idx_answers_attempt_question", "attempt_id", "question_id"),)
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    attempt_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("assessment_attempts.id", ondelete="CASCADE"))
    question_id: Mapped[int] = mapped_column(BigInteger)
    response_json: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    auto_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

# ========== Applications (read/updated by the attempt flow) ==========

class Application(Base):
    __tablename__ = "applications"
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    job_id: Mapped[int] = mapped_column(BigInteger)
    applicant_user_id: Mapped[Optional[int]] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=True, index=True)
    applicant_email: Mapped[str] = mapped_column(Text)
    applicant_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class ApplicationAssessment(Base):
    __tablename__ = "application_assessments"
    __table_args__ = (Index("idx_app_assessments_assessment", "assessment_id"),)
    id: Mapped[int] = mapped_column(PK, primary_key=True)
    application_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("applications.id", ondelete="CASCADE"))
    assessment_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("assessments.id", ondelete="CASCADE"))
    status: Mapped[str] = mapped_column(String(20), default=ASSIGNMENT_ASSIGNED)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
