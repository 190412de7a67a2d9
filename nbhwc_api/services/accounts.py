import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from nbhwc_api.core.auth import hash_password, verify_password
from nbhwc_api.core.config import settings
from nbhwc_api.core.errors import ConflictError, TransientStoreError
from nbhwc_api.models.orm import Topic, User, UserMastery, UserStats

logger = logging.getLogger(__name__)

def known_topics(db: Session) -> List[str]:
    names = list(settings.DEFAULT_TOPICS)
    for name in db.scalars(select(Topic.name).order_by(Topic.id)):
        if name not in names:
            names.append(name)
    return names

def register_user(db: Session, full_name: str, email: str, password: str) -> User:
    """Create the account with zeroed stats and a zero mastery row per known topic."""
    if db.scalar(select(User).where(User.email == email)):
        raise ConflictError("Email already exists.")
    try:
        user = User(full_name=full_name, email=email, password_hash=hash_password(password))
        db.add(user); db.flush()
        db.add(UserStats(user_id=user.id, points=0, current_streak=0, level=1, readiness=0))
        for topic in known_topics(db):
            db.add(UserMastery(user_id=user.id, topic_name=topic, mastery_score=0))
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("Email already exists.") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Registration error: {e}")
        raise TransientStoreError("Could not create account.") from e
    logger.info(f"Registered user {user.id}")
    return user

def authenticate(db: Session, email: str, password: str) -> User | None:
    user = db.scalar(select(User).where(User.email == email))
    if not user or not verify_password(password, user.password_hash):
        return None
    return user
