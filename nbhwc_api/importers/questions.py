"""
Load exam questions from a CSV into the catalog.

Expected columns: topic, question, option1..option4, correct_answer_index
(0-based, counted over the non-empty options), explanation, eli5,
difficulty (1-5, defaults to 2).

    python -m nbhwc_api.importers.questions questions.csv --batch-size 500
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy import delete
from sqlalchemy.orm import Session, sessionmaker

from nbhwc_api.core.config import settings
from nbhwc_api.core.database import SessionLocal
from nbhwc_api.importers.common import ImportReport, cli, run_import, upsert_topic
from nbhwc_api.models.orm import Question, QuestionOption

logger = logging.getLogger(__name__)

OPTION_COLUMNS = ["option1", "option2", "option3", "option4"]
DEFAULT_DIFFICULTY = 2

def _int_or(value: str, default: Optional[int]) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default

def parse_row(row: Dict[str, str]) -> Optional[dict]:
    topic = (row.get("topic") or "").strip()
    text = (row.get("question") or "").strip()
    options = [row[c].strip() for c in OPTION_COLUMNS if (row.get(c) or "").strip()]
    correct = _int_or(row.get("correct_answer_index"), None)
    if not topic or not text:
        logger.warning(f"Skipping row with missing topic or question text: {text[:60]!r}")
        return None
    if correct is None or not 0 <= correct < len(options):
        logger.warning(f"Skipping question {text[:60]!r}: correct_answer_index {row.get('correct_answer_index')!r} "
                       f"does not point at one of {len(options)} options")
        return None
    return {
        "topic": topic, "question": text, "options": options, "correct": correct,
        "explanation": row.get("explanation") or None, "eli5": row.get("eli5") or None,
        "difficulty": _int_or(row.get("difficulty"), DEFAULT_DIFFICULTY) or DEFAULT_DIFFICULTY,
    }

def clear_questions(db: Session) -> None:
    db.execute(delete(QuestionOption))
    db.execute(delete(Question))

def import_questions(path: str, session_factory: sessionmaker = SessionLocal,
                     batch_size: int = settings.IMPORT_BATCH_SIZE) -> ImportReport:
    topics: Dict[str, int] = {}

    def insert_batch(db: Session, rows: List[Dict[str, str]], report: ImportReport) -> None:
        for row in rows:
            q = parse_row(row)
            if q is None:
                report.skipped += 1
                continue
            question = Question(topic_id=upsert_topic(db, q["topic"], topics), question_text=q["question"],
                                difficulty=q["difficulty"], explanation=q["explanation"], eli5_explanation=q["eli5"])
            question.options = [QuestionOption(option_text=text, is_correct=i == q["correct"]) for i, text in enumerate(q["options"])]
            db.add(question)
            report.inserted += 1

    return run_import(path, "questions", clear_questions, insert_batch, session_factory, batch_size)

if __name__ == "__main__":
    cli("Import questions from a CSV file.", "questions.csv", import_questions)
