from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

class Base(DeclarativeBase): pass

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

# ========== Content Catalog ==========

class Topic(Base):
    __tablename__ = "topics"
    id: Mapped[int] = mapped_column("topic_id", Integer, primary_key=True)
    name: Mapped[str] = mapped_column("topic_name", String(255), unique=True, nullable=False)

class Question(Base):
    __tablename__ = "questions"
    __table_args__ = (Index("idx_questions_topic", "topic_id"),)
    id: Mapped[int] = mapped_column("question_id", Integer, primary_key=True)
    topic_id: Mapped[int] = mapped_column(Integer, ForeignKey("topics.topic_id"), nullable=False)
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    difficulty: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    explanation: Mapped[Optional[str]] = mapped_column(Text)
    eli5_explanation: Mapped[Optional[str]] = mapped_column(Text)

    options: Mapped[List["QuestionOption"]] = relationship(
        back_populates="question", cascade="all, delete-orphan", order_by="QuestionOption.id"
    )

class QuestionOption(Base):
    __tablename__ = "question_options"
    __table_args__ = (Index("idx_qo_question", "question_id"),)
    id: Mapped[int] = mapped_column("option_id", Integer, primary_key=True)
    question_id: Mapped[int] = mapped_column(Integer, ForeignKey("questions.question_id", ondelete="CASCADE"), nullable=False)
    option_text: Mapped[str] = mapped_column(String(255), nullable=False)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    question: Mapped["Question"] = relationship(back_populates="options")

class Flashcard(Base):
    __tablename__ = "flashcards"
    __table_args__ = (Index("idx_flashcards_topic", "topic_id"),)
    id: Mapped[int] = mapped_column("flashcard_id", Integer, primary_key=True)
    topic_id: Mapped[int] = mapped_column(Integer, ForeignKey("topics.topic_id"), nullable=False)
    term: Mapped[str] = mapped_column(Text, nullable=False)
    definition: Mapped[str] = mapped_column(Text, nullable=False)

class Scenario(Base):
    """Branching scenario. ``nodes`` maps node ids to ``{"text", "choices": [{"text", "next", "feedback"}]}``."""
    __tablename__ = "scenarios"
    id: Mapped[int] = mapped_column("scenario_id", Integer, primary_key=True)
    topic_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("topics.topic_id"))
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    start_node: Mapped[str] = mapped_column(String(64), nullable=False)
    nodes: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

class Puzzle(Base):
    """Ordering puzzle; ``items`` is stored in the correct order."""
    __tablename__ = "puzzles"
    id: Mapped[int] = mapped_column("puzzle_id", Integer, primary_key=True)
    topic_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("topics.topic_id"))
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    instructions: Mapped[Optional[str]] = mapped_column(Text)
    items: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

# ========== Users & Mastery Store ==========

class User(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column("user_id", Integer, primary_key=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    stats: Mapped[Optional["UserStats"]] = relationship(cascade="all, delete-orphan")
    mastery: Mapped[List["UserMastery"]] = relationship(cascade="all, delete-orphan")
    mastery_history: Mapped[List["UserMasteryHistory"]] = relationship(cascade="all, delete-orphan")
    achievements: Mapped[List["UserAchievement"]] = relationship(cascade="all, delete-orphan")

class UserStats(Base):
    __tablename__ = "user_stats"
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True)
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    readiness: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

class UserMastery(Base):
    __tablename__ = "user_mastery"
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True)
    topic_name: Mapped[str] = mapped_column(String(255), primary_key=True)
    mastery_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

class UserMasteryHistory(Base):
    __tablename__ = "user_mastery_history"
    __table_args__ = (Index("idx_umh_user_topic", "user_id", "topic_name", "recorded_at"),)
    id: Mapped[int] = mapped_column("history_id", Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    topic_name: Mapped[str] = mapped_column(String(255), nullable=False)
    mastery_score: Mapped[int] = mapped_column(Integer, nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

class UserAchievement(Base):
    __tablename__ = "user_achievements"
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True)
    achievement_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    unlocked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
