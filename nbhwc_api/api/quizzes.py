import random
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from nbhwc_api.core.auth import TokenData, get_current_user
from nbhwc_api.core.database import get_db
from nbhwc_api.services.quiz_generator import QuizQuestion, generate_quiz, get_rng
from nbhwc_api.services.scoring import submit_results

router = APIRouter()

class QuizCreate(BaseModel):
    topic: str
    duration: float = Field(description="Requested quiz length in minutes")

class QuizSubmit(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    topic: str
    correct_answers: int = Field(alias="correctAnswers")
    total_questions: int = Field(alias="totalQuestions")

class SubmitResult(BaseModel):
    message: str
    pointsAwarded: int
    masteryScore: int
    score: float

@router.post("", response_model=List[QuizQuestion])
def create_quiz(payload: QuizCreate, user: TokenData = Depends(get_current_user),
                db: Session = Depends(get_db), rng: random.Random = Depends(get_rng)):
    return generate_quiz(db, payload.topic, payload.duration, rng)

@router.post("/submit", response_model=SubmitResult)
def submit_quiz(payload: QuizSubmit, user: TokenData = Depends(get_current_user), db: Session = Depends(get_db)):
    result = submit_results(db, user.user_id, payload.topic, payload.correct_answers, payload.total_questions)
    return SubmitResult(message="Quiz results submitted successfully.", pointsAwarded=result.points_awarded,
                        masteryScore=result.mastery_score, score=result.score)
