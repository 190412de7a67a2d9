"""
Submission scoring: award points and move topic mastery toward 100.

Mastery is incremental. Each submission adds at most ``MAX_MASTERY_GAIN``
points, scaled by the run's score, and saturates at 100; a poor run never
lowers it.
"""
import logging
import math
from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from nbhwc_api.core.errors import TransientStoreError, ValidationError
from nbhwc_api.models.orm import UserMastery, UserMasteryHistory, UserStats

logger = logging.getLogger(__name__)

POINTS_PER_CORRECT = 10
PERFECT_RUN_BONUS = 50
MAX_MASTERY_GAIN = 20
MAX_MASTERY = 100

@dataclass
class SubmissionResult:
    score: float
    points_awarded: int
    mastery_score: int
    previous_mastery: int

def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))

def score_percent(correct: int, total: int) -> float:
    return correct / total * 100

def points_for(correct: int, total: int) -> int:
    bonus = PERFECT_RUN_BONUS if score_percent(correct, total) == 100 else 0
    return correct * POINTS_PER_CORRECT + bonus

def next_mastery(current: int, score: float) -> int:
    return min(MAX_MASTERY, round_half_up(current + score / 100 * MAX_MASTERY_GAIN))

def validate_submission(topic: str, correct: int, total: int) -> None:
    if not topic or not topic.strip():
        raise ValidationError("A topic is required.")
    if total is None or correct is None:
        raise ValidationError("correctAnswers and totalQuestions are required.")
    if total <= 0:
        raise ValidationError("totalQuestions must be greater than zero.")
    if correct < 0 or correct > total:
        raise ValidationError("correctAnswers must be between 0 and totalQuestions.")

def submit_results(db: Session, user_id: int, topic: str, correct: int, total: int) -> SubmissionResult:
    """Apply points, mastery and a history entry as one transaction."""
    validate_submission(topic, correct, total)
    score = score_percent(correct, total)
    points = points_for(correct, total)
    try:
        # increment in SQL so overlapping submissions never lose points
        bumped = db.execute(
            update(UserStats).where(UserStats.user_id == user_id).values(points=UserStats.points + points)
            .execution_options(synchronize_session=False)
        )
        if bumped.rowcount == 0:
            db.add(UserStats(user_id=user_id, points=points, current_streak=0, level=1, readiness=0))

        mastery = db.scalar(select(UserMastery).where(UserMastery.user_id == user_id, UserMastery.topic_name == topic))
        if mastery is None:
            mastery = UserMastery(user_id=user_id, topic_name=topic, mastery_score=0)
            db.add(mastery)
        previous = mastery.mastery_score or 0
        new_mastery = next_mastery(previous, score)
        mastery.mastery_score = new_mastery

        db.add(UserMasteryHistory(user_id=user_id, topic_name=topic, mastery_score=new_mastery))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Submission for user {user_id} on {topic!r} rolled back: {e}")
        raise TransientStoreError("Could not record quiz results.") from e

    logger.info(f"User {user_id} scored {score:.0f}% on {topic!r}: +{points} points, mastery {previous} -> {new_mastery}")
    return SubmissionResult(score=score, points_awarded=points, mastery_score=new_mastery, previous_mastery=previous)
