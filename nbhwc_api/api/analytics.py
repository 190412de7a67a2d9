from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from nbhwc_api.core.auth import TokenData, get_current_user
from nbhwc_api.core.database import get_db
from nbhwc_api.services.analytics import mastery_trend

router = APIRouter()

class TrendPoint(BaseModel):
    masteryScore: int
    recordedAt: datetime

@router.get("/mastery-trend", response_model=List[TrendPoint])
def get_mastery_trend(topic: Optional[str] = Query(None), user: TokenData = Depends(get_current_user),
                      db: Session = Depends(get_db)):
    return [TrendPoint(masteryScore=s, recordedAt=t) for s, t in mastery_trend(db, user.user_id, topic)]
