"""Database bootstrapping utilities."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.packages.glossary.core.config import get_settings
from app.packages.glossary.core.constants import ADMIN_ROLE
from app.packages.glossary.core.logger import logger
from app.packages.glossary.db import session as db_session
from app.packages.glossary.models import Base, UserProfile


def init_db() -> None:
    """Create all database tables if they do not exist and seed administrator profiles."""
    Base.metadata.create_all(bind=db_session.engine)

    session = db_session.SessionLocal()
    try:
        _seed_admin_profiles(session)
        session.commit()
    except Exception:  # pragma: no cover - initialization failures should surface
        session.rollback()
        logger.exception("Failed to seed default data during database initialization")
        raise
    finally:
        session.close()


def _seed_admin_profiles(db: Session) -> None:
    """Ensure every address listed in ``ADMIN_EMAILS`` owns an admin profile."""
    for email in sorted(get_settings().admin_emails):
        profile = db.query(UserProfile).filter(UserProfile.email == email).first()
        if profile is None:
            db.add(UserProfile(email=email, role=ADMIN_ROLE))
            logger.info("Seeded administrator profile for %s", email)
        elif profile.role != ADMIN_ROLE:
            profile.role = ADMIN_ROLE
            logger.info("Promoted %s to administrator", email)
