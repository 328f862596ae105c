import os
import shutil

# Point the application at the test database before anything imports settings
TEST_DATABASE_FILE = "./test_database.db"
TEST_DATABASE_URL = f"sqlite:///{TEST_DATABASE_FILE}"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
TEST_UPLOAD_DIR = "./test_uploads"
os.environ["UPLOAD_DIR"] = TEST_UPLOAD_DIR

import pytest
from unittest.mock import MagicMock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from invoicedesk.db.base import Base
from invoicedesk.db.session import get_db
from invoicedesk.models.document import Document, DocumentInfo, ProcessingStatus
from invoicedesk.services.context import build_context
from invoicedesk.services.extraction import AzureInvoiceExtractor, ExtractedInvoice
from invoicedesk.services.storage import StorageService, get_storage
import invoicedesk.models  # noqa: F401

# Create engine and sessionmaker for the SQLite file-based database
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def test_db_session():
    """Fresh tables and a session for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
        db.rollback()
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage(tmp_path):
    return StorageService(str(tmp_path / "uploads"), "http://testserver", "/files")


@pytest.fixture
def test_client(test_db_session, storage):
    """FastAPI TestClient using the test session and temporary storage"""
    from fastapi.testclient import TestClient
    from invoicedesk.main import app

    app.dependency_overrides[get_db] = lambda: test_db_session
    app.dependency_overrides[get_storage] = lambda: storage

    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def mock_extractor():
    extractor = MagicMock(AzureInvoiceExtractor)
    extractor.extract_document_info.return_value = ExtractedInvoice(
        vendor_name="Acme Supplies",
        invoice_number="INV-1001",
        invoice_date="January 15, 2024",
        total_amount=1250.5,
    )
    return extractor


@pytest.fixture
def processing_context(test_db_session, storage, mock_extractor):
    return build_context(test_db_session, storage=storage, extractor=mock_extractor)


@pytest.fixture
def stored_document(test_db_session, storage):
    """A document with one stored PDF file and a pending info row"""
    import io

    document = Document(id="doc-1", name="invoice.pdf", file_urls=[])
    ref = storage.save(document.id, "invoice.pdf", io.BytesIO(b"%PDF-1.4 test pdf content"))
    document.file_urls = [ref]
    document.info = DocumentInfo(processing_status=ProcessingStatus.PENDING)
    test_db_session.add(document)
    test_db_session.commit()
    return document


@pytest.fixture(scope="session", autouse=True)
def cleanup_db():
    """Remove the test database file after the run"""
    yield
    engine.dispose()
    if os.path.exists(TEST_DATABASE_FILE):
        os.remove(TEST_DATABASE_FILE)
    shutil.rmtree(TEST_UPLOAD_DIR, ignore_errors=True)
