"""
Collaborators used by the processing services, passed explicitly
"""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from invoicedesk.services.extraction import AzureInvoiceExtractor
from invoicedesk.services.persistence import Repository
from invoicedesk.services.processing_log import ProcessingLogWriter
from invoicedesk.services.storage import StorageService, get_storage


@dataclass
class ProcessingContext:
    db: Session
    storage: StorageService
    extractor: AzureInvoiceExtractor
    repository: Repository
    log_writer: ProcessingLogWriter


def build_context(
    db: Session,
    storage: Optional[StorageService] = None,
    extractor: Optional[AzureInvoiceExtractor] = None,
) -> ProcessingContext:
    """Context bound to ``db`` with default storage and extractor unless given"""
    return ProcessingContext(
        db=db,
        storage=storage or get_storage(),
        extractor=extractor or AzureInvoiceExtractor(),
        repository=Repository(db),
        log_writer=ProcessingLogWriter(db),
    )
