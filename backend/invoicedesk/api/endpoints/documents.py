"""
Document endpoints: upload, listing, processing and file access
"""
import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from invoicedesk.db.session import get_db
from invoicedesk.models.document import Document, DocumentInfo, ProcessingStatus
from invoicedesk.schemas.document import (
    DocumentResponse,
    DocumentStatusResponse,
    DocumentUploadResponse,
    FileUrlResponse,
    PageCountResponse,
    ProcessingLogResponse,
    ProcessRequest,
    ProcessResponse,
)
from invoicedesk.services.context import build_context
from invoicedesk.services.exceptions import UrlResolutionError
from invoicedesk.services.page_count import get_document_page_count
from invoicedesk.services.processing_log import ProcessingLogWriter
from invoicedesk.services.storage import StorageService, get_storage
from invoicedesk.tasks.document_processing import process_document_task

_log = logging.getLogger(__name__)

router = APIRouter()


def _get_document_or_404(db: Session, document_id: str) -> Document:
    document = db.query(Document).filter(Document.id == document_id).first()
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")
    return document


def _check_file_belongs(document: Document, file_url: str) -> None:
    if file_url not in (document.file_urls or []):
        raise HTTPException(status_code=400, detail="File does not belong to this document")


@router.post("/upload", response_model=DocumentUploadResponse)
def upload_document(
    files: List[UploadFile] = File(...),
    name: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    """Upload one or more PDF files as a new document"""
    for upload in files:
        if not upload.filename or not upload.filename.lower().endswith(".pdf"):
            raise HTTPException(status_code=400, detail="Only PDF files are allowed")

    document_id = str(uuid.uuid4())
    file_urls = [storage.save(document_id, upload.filename, upload.file) for upload in files]

    document = Document(
        id=document_id,
        name=name or files[0].filename,
        file_urls=file_urls,
    )
    document.info = DocumentInfo(processing_status=ProcessingStatus.PENDING)

    try:
        db.add(document)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        for ref in file_urls:
            storage.delete(ref)
        _log.error(f"Failed to save uploaded document: {e}")
        raise HTTPException(status_code=500, detail="Failed to save document")

    _log.info(f"Uploaded document {document_id} with {len(file_urls)} file(s)")
    return DocumentUploadResponse(
        document_id=document_id,
        name=document.name,
        file_urls=file_urls,
        status=ProcessingStatus.PENDING,
        message="Document uploaded successfully.",
    )


@router.get("/", response_model=List[DocumentResponse])
def list_documents(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    """List documents, newest first"""
    return (
        db.query(Document)
        .order_by(Document.created_at.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


@router.get("/{document_id}", response_model=DocumentResponse)
def get_document(document_id: str, db: Session = Depends(get_db)):
    return _get_document_or_404(db, document_id)


@router.get("/{document_id}/status", response_model=DocumentStatusResponse)
def get_document_status(document_id: str, db: Session = Depends(get_db)):
    document = _get_document_or_404(db, document_id)
    info = document.info
    return DocumentStatusResponse(
        document_id=document.id,
        status=info.processing_status if info else ProcessingStatus.PENDING,
        error_message=info.error_message if info else None,
    )


@router.get("/{document_id}/logs", response_model=List[ProcessingLogResponse])
def get_processing_logs(document_id: str, db: Session = Depends(get_db)):
    _get_document_or_404(db, document_id)
    return ProcessingLogWriter(db).entries_for(document_id)


@router.get("/{document_id}/page-count", response_model=PageCountResponse)
def get_page_count(
    document_id: str,
    file_url: str = Query(...),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    document = _get_document_or_404(db, document_id)
    _check_file_belongs(document, file_url)
    pages = get_document_page_count(build_context(db, storage=storage), document_id, file_url)
    return PageCountResponse(document_id=document_id, file_url=file_url, page_count=pages)


@router.get("/{document_id}/files/url", response_model=FileUrlResponse)
def get_file_url(
    document_id: str,
    file_url: str = Query(...),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    """Public URL of a document file, for preview or opening in a new tab"""
    document = _get_document_or_404(db, document_id)
    _check_file_belongs(document, file_url)
    try:
        public_url = storage.public_url(file_url)
    except UrlResolutionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return FileUrlResponse(file_url=file_url, public_url=public_url)


@router.post("/{document_id}/process", response_model=ProcessResponse)
def process_document(
    document_id: str,
    request: Optional[ProcessRequest] = Body(None),
    db: Session = Depends(get_db),
):
    """Queue extraction for one file of a document"""
    document = _get_document_or_404(db, document_id)
    if not document.file_urls:
        raise HTTPException(status_code=400, detail="Document has no files")

    file_url = request.file_url if request and request.file_url else document.file_urls[0]
    _check_file_belongs(document, file_url)

    task = process_document_task.delay(document_id, file_url)
    _log.info(f"Queued processing of {document_id} ({file_url})")
    return ProcessResponse(
        document_id=document_id,
        file_url=file_url,
        status="queued",
        task_id=task.id,
    )


@router.delete("/{document_id}")
def delete_document(
    document_id: str,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    document = _get_document_or_404(db, document_id)
    file_urls = list(document.file_urls or [])

    db.delete(document)
    db.commit()

    for ref in file_urls:
        try:
            storage.delete(ref)
        except (UrlResolutionError, OSError) as e:
            _log.warning(f"Could not delete file {ref}: {e}")

    return {"message": "Document deleted successfully"}
