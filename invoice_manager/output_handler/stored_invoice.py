"""
Stored Invoice Data Class.

A persisted invoice file: its storage metadata, processing status, the
OCR text and the normalized record.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from invoice_manager.postprocessor import InvoiceRecord
from invoice_manager.utils.helpers import get_file_name


STATUS_PENDING = "pending"
STATUS_UPLOADED = "uploaded"
STATUS_PROCESSING = "processing"
STATUS_PROCESSED = "processed"
STATUS_ERROR = "error"

VALID_STATUSES = (
    STATUS_PENDING,
    STATUS_UPLOADED,
    STATUS_PROCESSING,
    STATUS_PROCESSED,
    STATUS_ERROR,
)


@dataclass
class StoredInvoice:
    """
    One row of the invoice store.

    Attributes:
        id: Row id
        file_path: Path of the uploaded file
        created_at: ISO timestamp of registration
        status: One of ``VALID_STATUSES``
        extracted_text: OCR / text-layer output, if processed
        record: Normalized invoice fields
    """
    id: int
    file_path: str
    created_at: str
    status: str = STATUS_PENDING
    extracted_text: Optional[str] = None
    record: InvoiceRecord = field(default_factory=InvoiceRecord)

    @property
    def file_name(self) -> str:
        return get_file_name(self.file_path)

    @property
    def is_processed(self) -> bool:
        return self.status == STATUS_PROCESSED

    def to_dict(self) -> Dict[str, Any]:
        """Flat dictionary with the Spanish record keys, as stored."""
        result = {
            'id': self.id,
            'file_path': self.file_path,
            'created_at': self.created_at,
            'status': self.status,
            'extracted_text': self.extracted_text,
        }
        result.update(self.record.to_payload())
        return result

    def __repr__(self) -> str:
        return (
            f"StoredInvoice(id={self.id}, file='{self.file_name}', "
            f"status='{self.status}', provider={self.record.provider!r})"
        )
