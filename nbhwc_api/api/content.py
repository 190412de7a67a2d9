import random
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from nbhwc_api.core.auth import get_current_user
from nbhwc_api.core.database import get_db
from nbhwc_api.core.errors import NotFoundError
from nbhwc_api.models.orm import Flashcard, Puzzle, Scenario, Topic
from nbhwc_api.services.quiz_generator import get_rng

router = APIRouter(dependencies=[Depends(get_current_user)])

class Deck(BaseModel):
    topic: str; count: int

class FlashcardOut(BaseModel):
    id: int; term: str; definition: str

class ScenarioSummary(BaseModel):
    id: int; title: str; description: Optional[str] = None; topic: Optional[str] = None

class ScenarioOut(ScenarioSummary):
    start_node: str; nodes: dict

class PuzzleOut(BaseModel):
    id: int; title: str; instructions: Optional[str] = None; items: List[str]

class PuzzleCheck(BaseModel):
    order: List[str]

@router.get("/flashcards", response_model=List[Deck])
def list_decks(db: Session = Depends(get_db)):
    rows = db.execute(
        select(Topic.name, func.count(Flashcard.id)).join(Flashcard, Flashcard.topic_id == Topic.id)
        .group_by(Topic.name).order_by(Topic.name)
    ).all()
    return [Deck(topic=r[0], count=r[1]) for r in rows]

@router.get("/flashcards/{topic}", response_model=List[FlashcardOut])
def deck(topic: str, db: Session = Depends(get_db)):
    t = db.scalar(select(Topic).where(Topic.name == topic))
    if not t: raise NotFoundError(f'Topic "{topic}" not found.')
    cards = db.scalars(select(Flashcard).where(Flashcard.topic_id == t.id).order_by(Flashcard.id)).all()
    return [FlashcardOut(id=c.id, term=c.term, definition=c.definition) for c in cards]

@router.get("/scenarios", response_model=List[ScenarioSummary])
def list_scenarios(db: Session = Depends(get_db)):
    rows = db.execute(select(Scenario, Topic.name).outerjoin(Topic, Topic.id == Scenario.topic_id).order_by(Scenario.id)).all()
    return [ScenarioSummary(id=s.id, title=s.title, description=s.description, topic=name) for s, name in rows]

@router.get("/scenarios/{scenario_id}", response_model=ScenarioOut)
def get_scenario(scenario_id: int, db: Session = Depends(get_db)):
    s = db.get(Scenario, scenario_id)
    if not s: raise NotFoundError("Scenario not found.")
    topic = db.get(Topic, s.topic_id) if s.topic_id else None
    return ScenarioOut(id=s.id, title=s.title, description=s.description, topic=topic.name if topic else None,
                       start_node=s.start_node, nodes=s.nodes or {})

@router.get("/puzzles/{puzzle_id}", response_model=PuzzleOut)
def get_puzzle(puzzle_id: int, db: Session = Depends(get_db), rng: random.Random = Depends(get_rng)):
    p = db.get(Puzzle, puzzle_id)
    if not p: raise NotFoundError("Puzzle not found.")
    items = list(p.items or [])
    rng.shuffle(items)
    return PuzzleOut(id=p.id, title=p.title, instructions=p.instructions, items=items)

@router.post("/puzzles/{puzzle_id}/check")
def check_puzzle(puzzle_id: int, payload: PuzzleCheck, db: Session = Depends(get_db)):
    p = db.get(Puzzle, puzzle_id)
    if not p: raise NotFoundError("Puzzle not found.")
    return {"correct": payload.order == list(p.items or [])}
