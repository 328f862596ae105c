"""
Page count lookup with a file-size based estimate
"""
import logging
import math
from datetime import datetime, timezone

from invoicedesk.core.config import settings
from invoicedesk.models.document import DocumentInfo
from invoicedesk.services.context import ProcessingContext
from invoicedesk.services.persistence import ConflictPolicy

_log = logging.getLogger(__name__)


def estimate_page_count(size_bytes: int, bytes_per_page: int = None) -> int:
    """Rough page estimate from a file size, at least 1"""
    bytes_per_page = bytes_per_page or settings.BYTES_PER_PAGE
    return max(1, math.ceil(size_bytes / bytes_per_page))


def get_document_page_count(ctx: ProcessingContext, document_id: str, file_url: str) -> int:
    """
    Stored page count of a document, or an estimate that is then stored

    Any failure returns 1.
    """
    try:
        info = ctx.repository.get_by_key(DocumentInfo, "document_id", document_id)
        if info is not None and info.page_count:
            return info.page_count

        size = ctx.storage.file_size(file_url)
        pages = estimate_page_count(size)

        ctx.repository.upsert_by_key(
            DocumentInfo,
            "document_id",
            {
                "document_id": document_id,
                "page_count": pages,
                "updated_at": datetime.now(timezone.utc),
            },
            ConflictPolicy.OVERWRITE,
        )
        return pages
    except Exception as e:
        _log.error(f"Error getting page count for {document_id}: {e}")
        return 1
