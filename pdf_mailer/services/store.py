# pdf_mailer/services/store.py
import logging
from datetime import datetime

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from pdf_mailer.database import build_engine, build_session_factory, create_tables
from pdf_mailer.exceptions import StorageError
from pdf_mailer.models.submission import Submission
from pdf_mailer.schemas.submission import SubmissionCreate

logger = logging.getLogger(__name__)


class SubmissionStore:
    """Write-only log of accepted submissions."""

    def __init__(self, database_url: str):
        self.engine = build_engine(database_url)
        self.SessionLocal = build_session_factory(self.engine)

    def create_tables(self) -> None:
        try:
            create_tables(self.engine)
            logger.info("✅ Submissions table ready")
        except SQLAlchemyError as e:
            raise StorageError(f"Could not create submissions table: {e}") from e

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Database ping failed: {e}")
            return False

    def persist(self, submission: SubmissionCreate, system_timestamp: datetime) -> Submission:
        db = self.SessionLocal()
        try:
            record = Submission(
                first_name=submission.first_name,
                last_name=submission.last_name,
                email=submission.email,
                phone=submission.phone,
                custom_id=submission.custom_id,
                submission_date=submission.submission_date,
                system_timestamp=system_timestamp,
            )
            db.add(record)
            db.commit()
            db.refresh(record)
            logger.info(f"Submission {record.id} saved to database")
            return record
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ Failed to save submission for {submission.email}: {e}")
            raise StorageError(f"Could not save submission: {e}") from e
        finally:
            db.close()

    async def save(self, submission: SubmissionCreate, system_timestamp: datetime) -> Submission:
        return await run_in_threadpool(self.persist, submission, system_timestamp)

    def dispose(self) -> None:
        self.engine.dispose()
