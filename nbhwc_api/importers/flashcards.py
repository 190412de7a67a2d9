"""
Load flashcards (topic, term, definition) from a CSV.

Topics must already exist, so run the question import first; cards for an
unknown topic are skipped.
"""
import logging
from typing import Dict, List

from sqlalchemy import delete
from sqlalchemy.orm import Session, sessionmaker

from nbhwc_api.core.config import settings
from nbhwc_api.core.database import SessionLocal
from nbhwc_api.importers.common import ImportReport, cli, run_import, topic_ids
from nbhwc_api.models.orm import Flashcard

logger = logging.getLogger(__name__)

def clear_flashcards(db: Session) -> None:
    db.execute(delete(Flashcard))

def import_flashcards(path: str, session_factory: sessionmaker = SessionLocal,
                      batch_size: int = settings.IMPORT_BATCH_SIZE) -> ImportReport:
    topics: Dict[str, int] = {}

    def insert_batch(db: Session, rows: List[Dict[str, str]], report: ImportReport) -> None:
        if not topics:
            topics.update(topic_ids(db))
        for row in rows:
            topic, term, definition = (row.get(k, "").strip() for k in ("topic", "term", "definition"))
            topic_id = topics.get(topic)
            if topic_id is None:
                logger.warning(f'Topic "{topic}" not found in the database. Skipping flashcard: "{term}"')
                report.skipped += 1
                continue
            if not term or not definition:
                logger.warning(f"Skipping flashcard with empty term or definition under {topic!r}")
                report.skipped += 1
                continue
            db.add(Flashcard(topic_id=topic_id, term=term, definition=definition))
            report.inserted += 1

    return run_import(path, "flashcards", clear_flashcards, insert_batch, session_factory, batch_size)

if __name__ == "__main__":
    cli("Import flashcards from a CSV file.", "flashcards.csv", import_flashcards)
