"""
Shared plumbing for the offline CSV importers.

Rows are streamed from disk in chunks of ``batch_size``; each chunk is
written in its own transaction, so a late failure leaves earlier batches
committed. The first batch also clears the previous generation of rows,
which means an empty or header-only file never wipes existing content.
"""
import argparse
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List

import pandas as pd
from pandas.errors import EmptyDataError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from nbhwc_api.core.config import settings
from nbhwc_api.core.errors import TransientStoreError
from nbhwc_api.core.logging import configure_logging
from nbhwc_api.models.orm import Topic

logger = logging.getLogger(__name__)

@dataclass
class ImportReport:
    read: int = 0
    inserted: int = 0
    skipped: int = 0
    batches: int = 0

def read_batches(path: str, batch_size: int) -> Iterator[List[Dict[str, str]]]:
    try:
        reader = pd.read_csv(path, chunksize=batch_size, dtype=str, keep_default_na=False, skipinitialspace=True)
        for chunk in reader:
            if not chunk.empty:
                yield chunk.to_dict(orient="records")
    except EmptyDataError:
        return

def topic_ids(db: Session) -> Dict[str, int]:
    return {name: tid for tid, name in db.execute(select(Topic.id, Topic.name)).all()}

def upsert_topic(db: Session, name: str, cache: Dict[str, int]) -> int:
    if name in cache:
        return cache[name]
    t = db.scalar(select(Topic).where(Topic.name == name))
    if not t:
        t = Topic(name=name)
        db.add(t); db.flush()
    cache[name] = t.id
    return t.id

def run_import(path: str, label: str, clear: Callable[[Session], None],
               insert_batch: Callable[[Session, List[Dict[str, str]], ImportReport], None],
               session_factory: sessionmaker, batch_size: int) -> ImportReport:
    report = ImportReport()
    logger.info(f"Reading {label} from {path} in batches of {batch_size}")
    for rows in read_batches(path, batch_size):
        report.read += len(rows)
        try:
            with session_factory.begin() as db:
                if report.batches == 0:
                    clear(db)
                    logger.info(f"Cleared existing {label}")
                insert_batch(db, rows, report)
        except SQLAlchemyError as e:
            logger.error(f"Batch {report.batches + 1} of {label} failed and was rolled back: {e}")
            raise TransientStoreError(f"Import of {label} failed at batch {report.batches + 1}.") from e
        report.batches += 1
    if report.batches == 0:
        logger.info(f"No {label} found to import.")
    else:
        logger.info(f"Imported {report.inserted} {label} ({report.skipped} skipped) in {report.batches} batches")
    return report

def cli(description: str, default_file: str, run: Callable[..., ImportReport]) -> None:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("csv_path", nargs="?", default=default_file)
    parser.add_argument("--batch-size", type=int, default=settings.IMPORT_BATCH_SIZE)
    args = parser.parse_args()
    configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    report = run(args.csv_path, batch_size=args.batch_size)
    print(f"read={report.read} inserted={report.inserted} skipped={report.skipped} batches={report.batches}")
