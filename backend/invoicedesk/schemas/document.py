from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class DocumentInfoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    vendor_name: Optional[str] = None
    invoice_number: Optional[str] = None
    invoice_date: Optional[date] = None
    total_amount: Optional[float] = None
    processing_status: str
    error_message: Optional[str] = None
    page_count: Optional[int] = None
    file_url: Optional[str] = None
    processed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    file_urls: List[str]
    created_at: Optional[datetime] = None
    info: Optional[DocumentInfoResponse] = None


class DocumentUploadResponse(BaseModel):
    document_id: str
    name: str
    file_urls: List[str]
    status: str
    message: str


class DocumentStatusResponse(BaseModel):
    document_id: str
    status: str
    error_message: Optional[str] = None


class ProcessingLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    status: str
    step: str
    details: Optional[Dict[str, Any]] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None


class ProcessRequest(BaseModel):
    file_url: Optional[str] = None


class ProcessResponse(BaseModel):
    document_id: str
    file_url: str
    status: str
    task_id: Optional[str] = None


class PageCountResponse(BaseModel):
    document_id: str
    file_url: str
    page_count: int


class FileUrlResponse(BaseModel):
    file_url: str
    public_url: str
