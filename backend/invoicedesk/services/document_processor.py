"""
Document processing service

- Resolve the stored file to a public URL
- Extract invoice fields with the extraction service
- Validate and normalize the invoice date
- Upsert the DocumentInfo record for the document
- Log every status transition
"""
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from invoicedesk.models.document import DocumentInfo, ProcessingStatus
from invoicedesk.services.context import ProcessingContext
from invoicedesk.services.date_parser import parse_date
from invoicedesk.services.exceptions import DateFormatError, ExtractionError, InvalidInputError
from invoicedesk.services.persistence import ConflictPolicy

_log = logging.getLogger(__name__)


@dataclass
class ProcessingResult:
    success: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"success": self.success}
        if self.error is not None:
            result["error"] = self.error
        return result


class DocumentProcessor:
    """Run extraction for one document file and persist the outcome"""

    def __init__(self, context: ProcessingContext):
        self.context = context

    def process_document(self, document_id: str, file_url: str) -> ProcessingResult:
        """
        Process one file of a document

        Never raises: every failure is logged, recorded on the DocumentInfo
        row with status "error", and returned as a failed result.

        Args:
            document_id: Document identifier
            file_url: Storage reference of the file to process

        Returns:
            ProcessingResult with success flag and error message
        """
        if not document_id:
            error = InvalidInputError("Invalid document ID")
            _log.error(str(error))
            return ProcessingResult(success=False, error=str(error))

        start_time = time.monotonic()
        ctx = self.context

        try:
            ctx.log_writer.log(
                document_id,
                ProcessingStatus.PROCESSING,
                "Starting document processing",
                details={"file_url": file_url},
            )
            self._save_info(document_id, {
                "processing_status": ProcessingStatus.PROCESSING,
                "file_url": file_url,
            })

            public_url = ctx.storage.public_url(file_url)

            extracted = ctx.extractor.extract_document_info(public_url)
            if not extracted:
                raise ExtractionError("Failed to extract document information")

            parsed_date = parse_date(extracted.invoice_date) if extracted.invoice_date else None
            if extracted.invoice_date and not parsed_date:
                raise DateFormatError(extracted.invoice_date)

            now = datetime.now(timezone.utc)
            self._save_info(document_id, {
                "vendor_name": extracted.vendor_name,
                "invoice_number": extracted.invoice_number,
                "invoice_date": parsed_date,
                "total_amount": extracted.total_amount,
                "processing_status": ProcessingStatus.COMPLETED,
                "error_message": None,
                "processed_at": now,
                "file_url": file_url,
            })

            ctx.log_writer.log(
                document_id,
                ProcessingStatus.COMPLETED,
                "Document processing completed",
                details={
                    "processing_time_ms": self._elapsed_ms(start_time),
                    "document_info": {**extracted.to_dict(), "invoice_date": parsed_date},
                },
            )
            return ProcessingResult(success=True)

        except Exception as e:
            message = str(e) or "Failed to process document"
            _log.exception(f"Document processing error for {document_id}: {message}")
            self._record_failure(document_id, message, self._elapsed_ms(start_time))
            return ProcessingResult(success=False, error=message)

    def _save_info(self, document_id: str, fields: Dict[str, Any]) -> None:
        fields = {
            "document_id": document_id,
            **fields,
            "updated_at": datetime.now(timezone.utc),
        }
        self.context.repository.upsert_by_key(
            DocumentInfo, "document_id", fields, ConflictPolicy.OVERWRITE
        )

    def _record_failure(self, document_id: str, message: str, elapsed_ms: int) -> None:
        """Log the error and mark the record failed; nothing raised here reaches the caller"""
        try:
            self.context.db.rollback()
        except Exception as e:
            _log.error(f"Failed to roll back session for {document_id}: {e}")

        try:
            self.context.log_writer.log(
                document_id,
                ProcessingStatus.ERROR,
                "Document processing failed",
                details={"error": message, "processing_time_ms": elapsed_ms},
                error_message=message,
            )
        except Exception as e:
            _log.error(f"Failed to log processing error for {document_id}: {e}")

        try:
            self._save_info(document_id, {
                "processing_status": ProcessingStatus.ERROR,
                "error_message": message,
            })
        except Exception as e:
            _log.error(f"Failed to update document status for {document_id}: {e}")

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return int((time.monotonic() - start_time) * 1000)
