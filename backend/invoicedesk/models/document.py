"""
Document database models
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, CheckConstraint, Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from invoicedesk.db.base import Base


def _utcnow():
    return datetime.now(timezone.utc)


class ProcessingStatus:
    """Allowed values of DocumentInfo.processing_status"""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

    ALL = (PENDING, PROCESSING, COMPLETED, ERROR)


class Document(Base):
    """Uploaded document with one or more stored files"""

    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    file_urls = Column(JSON, nullable=False, default=list)  # ordered storage references
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    # Relationships
    info = relationship("DocumentInfo", back_populates="document", uselist=False, cascade="all, delete-orphan")
    logs = relationship(
        "ProcessingLogEntry",
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="ProcessingLogEntry.id",
    )


class DocumentInfo(Base):
    """Extracted fields and processing status, one row per document"""

    __tablename__ = "document_info"
    __table_args__ = (
        CheckConstraint(
            "processing_status IN (" + ", ".join(f"'{status}'" for status in ProcessingStatus.ALL) + ")",
            name="ck_document_info_processing_status",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    document_id = Column(String(36), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, unique=True)
    vendor_name = Column(String(255))
    invoice_number = Column(String(100))
    invoice_date = Column(Date)
    total_amount = Column(Float)
    processing_status = Column(String(20), nullable=False, default=ProcessingStatus.PENDING)
    error_message = Column(Text)
    page_count = Column(Integer)
    file_url = Column(String(500))
    processed_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True), default=_utcnow)

    document = relationship("Document", back_populates="info")


class ProcessingLogEntry(Base):
    """Append-only record of a processing status transition"""

    __tablename__ = "processing_logs"

    id = Column(Integer, primary_key=True, index=True)
    document_id = Column(String(36), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False)
    step = Column(String(255), nullable=False)
    details = Column(JSON, default=dict)
    error_message = Column(Text)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    document = relationship("Document", back_populates="logs")
