from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from nbhwc_api.core.auth import TokenData, get_current_user
from nbhwc_api.core.database import get_db
from nbhwc_api.core.errors import NotFoundError
from nbhwc_api.models.orm import UserAchievement, UserMastery, UserStats

router = APIRouter()

@router.get("/data")
def user_data(user: TokenData = Depends(get_current_user), db: Session = Depends(get_db)):
    stats = db.get(UserStats, user.user_id)
    if not stats: raise NotFoundError("User data not found.")
    mastery = db.execute(select(UserMastery.topic_name, UserMastery.mastery_score).where(UserMastery.user_id == user.user_id)).all()
    achievements = db.scalars(select(UserAchievement.achievement_id).where(UserAchievement.user_id == user.user_id)).all()
    return {
        "stats": {"user_id": stats.user_id, "points": stats.points, "current_streak": stats.current_streak,
                  "level": stats.level, "readiness": stats.readiness},
        "mastery": {r[0]: r[1] for r in mastery},
        "unlockedAchievements": list(achievements),
        "planSettings": None,
        "personalizedPlan": None,
    }
