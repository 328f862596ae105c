"""
Invoice field extraction using Azure AI Document Intelligence

The prebuilt invoice model is asked to analyze a document by URL, and the
vendor, invoice number, invoice date and total are read from the first
analyzed document.
"""
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from azure.ai.documentintelligence import DocumentIntelligenceClient
from azure.ai.documentintelligence.models import AnalyzeDocumentRequest
from azure.core.credentials import AzureKeyCredential

from invoicedesk.core.config import settings
from invoicedesk.services.date_parser import parse_amount
from invoicedesk.services.exceptions import ExtractionError

_log = logging.getLogger(__name__)


@dataclass
class ExtractedInvoice:
    """Fields read from an invoice; invoice_date is unparsed text"""

    vendor_name: Optional[str] = None
    invoice_number: Optional[str] = None
    invoice_date: Optional[str] = None
    total_amount: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class AzureInvoiceExtractor:
    """Extract invoice fields from a document URL"""

    def __init__(
        self,
        endpoint: Optional[str] = None,
        api_key: Optional[str] = None,
        model_id: Optional[str] = None,
        client: Optional[DocumentIntelligenceClient] = None,
    ):
        self.endpoint = endpoint or settings.AZURE_DOCUMENT_INTELLIGENCE_ENDPOINT
        self.api_key = api_key or settings.AZURE_DOCUMENT_INTELLIGENCE_KEY
        self.model_id = model_id or settings.AZURE_INVOICE_MODEL_ID
        self._client = client

    @property
    def client(self) -> DocumentIntelligenceClient:
        if self._client is None:
            if not self.endpoint or not self.api_key:
                raise ExtractionError("Azure Document Intelligence is not configured")
            self._client = DocumentIntelligenceClient(
                endpoint=self.endpoint,
                credential=AzureKeyCredential(self.api_key),
            )
            _log.info(f"Initialized Azure Document Intelligence client for {self.endpoint}")
        return self._client

    def extract_document_info(self, url: str) -> Optional[ExtractedInvoice]:
        """
        Analyze the document at ``url``

        Returns:
            The extracted fields, or None if the service found no invoice.
            Errors raised by the Azure SDK are not caught here.
        """
        poller = self.client.begin_analyze_document(
            self.model_id,
            body=AnalyzeDocumentRequest(url_source=url),
        )
        result = poller.result()
        if not result:
            return None
        return self._invoice_from_result(result.as_dict())

    def _invoice_from_result(self, result: Dict[str, Any]) -> Optional[ExtractedInvoice]:
        documents = result.get("documents") or []
        if not documents:
            _log.warning("Azure Document Intelligence returned no documents")
            return None

        fields = documents[0].get("fields") or {}
        if not fields:
            return None

        return ExtractedInvoice(
            vendor_name=self._get_field_value(fields, "VendorName"),
            invoice_number=self._get_field_value(fields, "InvoiceId"),
            invoice_date=self._get_date_text(fields, "InvoiceDate"),
            total_amount=self._get_amount(fields, "InvoiceTotal"),
        )

    def _get_field_value(self, fields: Dict[str, Any], field_name: str) -> Optional[str]:
        field = fields.get(field_name)
        if not field:
            return None
        value = field.get("valueString") or field.get("content")
        return value.strip() if value else None

    def _get_date_text(self, fields: Dict[str, Any], field_name: str) -> Optional[str]:
        # printed text is only used when the service did not normalize the date
        field = fields.get(field_name)
        if not field:
            return None
        value = field.get("valueDate") or field.get("content")
        return value.strip() if value else None

    def _get_amount(self, fields: Dict[str, Any], field_name: str) -> Optional[float]:
        field = fields.get(field_name)
        if not field:
            return None
        currency = field.get("valueCurrency")
        if currency and currency.get("amount") is not None:
            return float(currency["amount"])
        if field.get("valueNumber") is not None:
            return float(field["valueNumber"])
        return parse_amount(field.get("content"))
