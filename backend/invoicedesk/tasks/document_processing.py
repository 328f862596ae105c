import logging

from invoicedesk.celery import celery_app
from invoicedesk.db.session import SessionLocal
from invoicedesk.services.context import build_context
from invoicedesk.services.document_processor import DocumentProcessor

_log = logging.getLogger(__name__)


@celery_app.task
def process_document_task(document_id: str, file_url: str):
    """Background task to process one file of a document"""
    db = SessionLocal()

    try:
        processor = DocumentProcessor(build_context(db))
        result = processor.process_document(document_id, file_url)
        if not result.success:
            _log.warning(f"Processing of {document_id} failed: {result.error}")
        return result.to_dict()
    finally:
        db.close()
