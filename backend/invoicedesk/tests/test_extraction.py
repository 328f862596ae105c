from unittest.mock import MagicMock

import pytest

from invoicedesk.core.config import settings
from invoicedesk.services.exceptions import ExtractionError
from invoicedesk.services.extraction import AzureInvoiceExtractor, ExtractedInvoice


def _client_returning(result_dict):
    client = MagicMock()
    result = MagicMock()
    result.as_dict.return_value = result_dict
    client.begin_analyze_document.return_value.result.return_value = result
    return client


def test_extract_invoice_fields():
    client = _client_returning({
        "modelId": "prebuilt-invoice",
        "documents": [{
            "fields": {
                "VendorName": {"type": "string", "valueString": "Acme Supplies", "content": "ACME SUPPLIES"},
                "InvoiceId": {"type": "string", "valueString": "INV-1001"},
                "InvoiceDate": {"type": "date", "valueDate": "2024-01-15", "content": "Jan 15, 2024"},
                "InvoiceTotal": {"type": "currency", "valueCurrency": {"amount": 1250.5}, "content": "$1,250.50"},
            }
        }],
    })
    extractor = AzureInvoiceExtractor(model_id="prebuilt-invoice", client=client)

    info = extractor.extract_document_info("http://testserver/files/doc-1/invoice.pdf")

    assert info == ExtractedInvoice(
        vendor_name="Acme Supplies",
        invoice_number="INV-1001",
        invoice_date="2024-01-15",
        total_amount=1250.5,
    )
    args, kwargs = client.begin_analyze_document.call_args
    assert args[0] == "prebuilt-invoice"
    assert kwargs["body"].url_source == "http://testserver/files/doc-1/invoice.pdf"


def test_extract_total_from_content():
    client = _client_returning({
        "documents": [{"fields": {"InvoiceTotal": {"type": "currency", "content": "$99.90"}}}],
    })

    info = AzureInvoiceExtractor(client=client).extract_document_info("http://testserver/a.pdf")

    assert info.total_amount == 99.9
    assert info.vendor_name is None
    assert info.invoice_date is None


def test_extract_no_documents_returns_none():
    client = _client_returning({"documents": []})

    assert AzureInvoiceExtractor(client=client).extract_document_info("http://testserver/a.pdf") is None


def test_extractor_not_configured(monkeypatch):
    monkeypatch.setattr(settings, "AZURE_DOCUMENT_INTELLIGENCE_ENDPOINT", None)
    monkeypatch.setattr(settings, "AZURE_DOCUMENT_INTELLIGENCE_KEY", None)

    with pytest.raises(ExtractionError):
        AzureInvoiceExtractor().extract_document_info("http://testserver/a.pdf")


def test_extract_prefers_normalized_date():
    client = _client_returning({
        "documents": [{"fields": {
            "InvoiceDate": {"type": "date", "valueDate": "2024-01-15", "content": "15th January 2024"},
        }}],
    })

    info = AzureInvoiceExtractor(client=client).extract_document_info("http://testserver/a.pdf")

    assert info.invoice_date == "2024-01-15"


def test_extract_date_falls_back_to_printed_text():
    client = _client_returning({
        "documents": [{"fields": {"InvoiceDate": {"type": "date", "content": "Jan 15, 2024"}}}],
    })

    info = AzureInvoiceExtractor(client=client).extract_document_info("http://testserver/a.pdf")

    assert info.invoice_date == "Jan 15, 2024"
