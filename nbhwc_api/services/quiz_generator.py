"""
Quiz generation: pick a random, bounded subset of a topic's questions.

Question count follows a fixed pacing policy of 90 seconds per question with
a floor of three questions, however short the requested duration.
"""
import logging
import math
import random
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from nbhwc_api.core.config import settings
from nbhwc_api.core.errors import NotFoundError, ValidationError
from nbhwc_api.models.orm import Question, Topic

logger = logging.getLogger(__name__)

MINUTES_PER_QUESTION = 1.5
MIN_QUESTIONS = 3

class QuizQuestion(BaseModel):
    id: int
    question: str
    explanation: Optional[str] = None
    eli5: Optional[str] = None
    answer: str
    options: List[str]

_seeded_rng: Optional[random.Random] = None

def get_rng() -> random.Random:
    """Random source for sampling and shuffling; overridable as a FastAPI dependency.

    With ``RANDOM_SEED`` set, one generator is seeded once and shared, so
    successive quizzes follow a reproducible sequence instead of repeating.
    """
    global _seeded_rng
    if settings.RANDOM_SEED is None:
        return random.SystemRandom()
    if _seeded_rng is None:
        _seeded_rng = random.Random(settings.RANDOM_SEED)
    return _seeded_rng

def question_count(duration_minutes: float) -> int:
    return max(MIN_QUESTIONS, math.floor(duration_minutes / MINUTES_PER_QUESTION))

def _correct_option(q: Question):
    correct = [o for o in q.options if o.is_correct]
    if len(correct) != 1:
        logger.warning(f"Skipping malformed question {q.id}: {len(correct)} options marked correct")
        return None
    return correct[0]

def to_quiz_question(q: Question, answer: str, rng: random.Random) -> QuizQuestion:
    options = [o.option_text for o in q.options]
    rng.shuffle(options)
    return QuizQuestion(id=q.id, question=q.question_text, explanation=q.explanation,
                        eli5=q.eli5_explanation, answer=answer, options=options)

def generate_quiz(db: Session, topic: str, duration_minutes: float, rng: random.Random) -> List[QuizQuestion]:
    if not topic or not topic.strip():
        raise ValidationError("A topic is required.")
    if duration_minutes is None or not math.isfinite(duration_minutes) or duration_minutes < 0:
        raise ValidationError("Duration must be a non-negative number of minutes.")

    t = db.scalar(select(Topic).where(Topic.name == topic))
    if not t:
        raise NotFoundError(f'Topic "{topic}" not found.')

    rows = db.scalars(
        select(Question).where(Question.topic_id == t.id).options(selectinload(Question.options)).order_by(Question.id)
    ).all()
    pool = []
    for q in rows:
        correct = _correct_option(q)
        if correct is not None:
            pool.append((q, correct.option_text))

    wanted = question_count(duration_minutes)
    picked = rng.sample(pool, min(wanted, len(pool)))
    if len(picked) < wanted:
        logger.info(f'Topic "{topic}" has {len(pool)} usable questions, {wanted} requested')
    return [to_quiz_question(q, answer, rng) for q, answer in picked]
