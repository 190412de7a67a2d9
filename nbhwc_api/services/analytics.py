from datetime import datetime
from typing import List, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from nbhwc_api.core.errors import ValidationError
from nbhwc_api.models.orm import UserMasteryHistory

def mastery_trend(db: Session, user_id: int, topic: str | None) -> List[Tuple[int, datetime]]:
    """Mastery history for one topic, oldest first. No history is an empty list, not an error."""
    if not topic or not topic.strip():
        raise ValidationError("A topic query parameter is required.")
    rows = db.execute(
        select(UserMasteryHistory.mastery_score, UserMasteryHistory.recorded_at)
        .where(UserMasteryHistory.user_id == user_id, UserMasteryHistory.topic_name == topic)
        .order_by(UserMasteryHistory.recorded_at.asc(), UserMasteryHistory.id.asc())
    ).all()
    return [(r[0], r[1]) for r in rows]
