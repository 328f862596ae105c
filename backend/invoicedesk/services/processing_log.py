"""
Processing log writer

Every status transition of a document is appended to processing_logs and
mirrored to the application logger.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from invoicedesk.models.document import ProcessingLogEntry, ProcessingStatus
from invoicedesk.services.exceptions import PersistenceError

_log = logging.getLogger(__name__)


class ProcessingLogWriter:
    """Append-only writer for ProcessingLogEntry rows"""

    def __init__(self, db: Session):
        self.db = db

    def log(
        self,
        document_id: str,
        status: str,
        step: str,
        details: Optional[Dict[str, Any]] = None,
        error_message: Optional[str] = None,
    ) -> ProcessingLogEntry:
        """
        Append a log entry for a document

        Raises:
            PersistenceError: If the entry could not be written
        """
        entry = ProcessingLogEntry(
            document_id=document_id,
            status=status,
            step=step,
            details=jsonable_encoder(details or {}),
            error_message=error_message,
        )

        if status == ProcessingStatus.ERROR:
            _log.error(f"[{document_id}] {step}: {error_message}")
        else:
            _log.info(f"[{document_id}] {step} ({status})")

        try:
            self.db.add(entry)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Failed to write processing log: {e}") from e
        return entry

    def entries_for(self, document_id: str) -> List[ProcessingLogEntry]:
        """Log entries of a document, oldest first"""
        return (
            self.db.query(ProcessingLogEntry)
            .filter(ProcessingLogEntry.document_id == document_id)
            .order_by(ProcessingLogEntry.id)
            .all()
        )
