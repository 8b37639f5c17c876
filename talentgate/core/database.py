from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from talentgate.core.config import settings

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO, connect_args=connect_args, future=True, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


class Base(DeclarativeBase):
    pass


def get_db():
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind=None) -> None:
    """Create tables if they don't exist."""
    # registers the mapped classes on Base.metadata
    import talentgate.models.orm  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
