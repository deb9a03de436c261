"""
Invoice Processing Pipeline.

This module wires the collaborators together for one invoice at a time:

    file -> text (pdf layer / OCR) -> Gemini -> JSON -> FieldNormalizer
         -> validation -> InvoiceStore

Each invoice moves through the statuses ``uploaded`` -> ``processing`` ->
``processed``, or ends in ``error``. Failures are recorded on the invoice
and returned, never raised, so one bad file does not stop a batch.

Author: ML Engineering Team
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from invoice_manager.config import AppSettings, get_config
from invoice_manager.input_handler import InputHandler
from invoice_manager.model_inference import InvoiceExtractor, QuotaCooldown
from invoice_manager.output_handler import (
    STATUS_ERROR,
    STATUS_PROCESSED,
    STATUS_PROCESSING,
    STATUS_UPLOADED,
    InvoiceStore,
)
from invoice_manager.postprocessor import InvoiceRecord, PostProcessor
from invoice_manager.utils.logger import get_logger, invoice_context
from invoice_manager.utils.exceptions import (
    InvoiceManagerError,
    QuotaExceededError,
    StorageError,
)

# Initialize module logger
logger = get_logger(__name__)


@dataclass
class ProcessingOutcome:
    """
    Result of processing one invoice.

    Attributes:
        invoice_id: Row id in the store (None if the file could not be registered)
        file_path: Source file path
        status: Final status (``processed`` or ``error``)
        record: Normalized record when processed
        warnings: Validation warnings
        error: The failure when status is ``error``
    """
    invoice_id: Optional[int]
    file_path: str
    status: str
    record: Optional[InvoiceRecord] = None
    warnings: List[str] = field(default_factory=list)
    error: Optional[InvoiceManagerError] = None

    @property
    def success(self) -> bool:
        return self.status == STATUS_PROCESSED

    @property
    def user_message(self) -> Optional[str]:
        """Message suitable for showing to the user, if processing failed."""
        if self.error is None:
            return None
        if isinstance(self.error, QuotaExceededError):
            return (
                "Se alcanzó el límite de uso de la IA. "
                f"Intenta de nuevo en {self.error.retry_after:.0f} segundos."
            )
        return getattr(self.error, 'USER_MESSAGE', None) or self.error.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            'invoice_id': self.invoice_id,
            'file_path': self.file_path,
            'status': self.status,
            'record': self.record.to_payload() if self.record else None,
            'warnings': self.warnings,
            'error': str(self.error) if self.error else None,
        }


class InvoicePipeline:
    """
    End-to-end invoice processing.

    Example:
        >>> settings = load_settings()
        >>> pipeline = InvoicePipeline(settings)
        >>> outcome = pipeline.process_file("facturas/luz.pdf")
        >>> outcome.record.total_amount if outcome.success else outcome.user_message
    """

    def __init__(
        self,
        settings: AppSettings,
        store: Optional[InvoiceStore] = None,
        input_handler: Optional[InputHandler] = None,
        extractor: Optional[InvoiceExtractor] = None,
        post_processor: Optional[PostProcessor] = None,
        cooldown: Optional[QuotaCooldown] = None
    ) -> None:
        self.settings = settings
        self.store = store or InvoiceStore(settings.database_path)
        self.input_handler = input_handler or InputHandler(language=settings.ocr_language)
        self.extractor = extractor or InvoiceExtractor(settings)
        self.post_processor = post_processor or PostProcessor()
        self.cooldown = cooldown or QuotaCooldown()
        self.classify_missing_category = get_config("pipeline.classify_missing_category", False)

        logger.info("InvoicePipeline initialized")

    def process_file(self, file_path: Union[str, Path]) -> ProcessingOutcome:
        """
        Register a file and run it through the whole pipeline.

        Returns:
            ProcessingOutcome; failures are recorded, not raised.
        """
        file_path = str(file_path)
        try:
            invoice_id = self.store.create(file_path, status=STATUS_UPLOADED)
        except StorageError as e:
            logger.error(f"Could not register {file_path}: {e}")
            return ProcessingOutcome(None, file_path, STATUS_ERROR, error=e)

        logger.info(f"Registered {file_path} as invoice {invoice_id}")

        return self._run(
            invoice_id,
            file_path,
            lambda: self.input_handler.extract_text(file_path).text
        )

    def process_text(self, invoice_id: int, text: str) -> ProcessingOutcome:
        """
        Re-run extraction on stored or edited text.

        Raises:
            RecordNotFoundError: If the invoice does not exist.
        """
        invoice = self.store.get(invoice_id)
        logger.info(f"Reprocessing text of invoice {invoice_id}")
        return self._run(invoice_id, invoice.file_path, lambda: text)

    def process_batch(self, file_paths: Iterable[Union[str, Path]]) -> List[ProcessingOutcome]:
        """Process files one after another; each failure stays with its file."""
        file_paths = list(file_paths)
        outcomes = []

        for index, file_path in enumerate(file_paths, 1):
            logger.info(f"Processing file {index}/{len(file_paths)}: {Path(file_path).name}")
            outcomes.append(self.process_file(file_path))

        successful = sum(1 for outcome in outcomes if outcome.success)
        logger.info(
            f"Batch processing complete: {successful} successful, "
            f"{len(outcomes) - successful} failed"
        )
        return outcomes

    def _run(
        self,
        invoice_id: int,
        file_path: str,
        get_text: Callable[[], str]
    ) -> ProcessingOutcome:
        with invoice_context(invoice_id):
            return self._run_steps(invoice_id, file_path, get_text)

    def _run_steps(
        self,
        invoice_id: int,
        file_path: str,
        get_text: Callable[[], str]
    ) -> ProcessingOutcome:
        try:
            self.store.set_status(invoice_id, STATUS_PROCESSING)

            text = get_text()
            payload = self._extract(text)
            record, validation = self.post_processor.process(payload)

            if self.classify_missing_category and record.category is None:
                record = self._with_category(record, text)

            self.store.save_extraction(invoice_id, text, record)

        except InvoiceManagerError as e:
            logger.error(f"Invoice {invoice_id} failed: {e}")
            self._mark_error(invoice_id)
            return ProcessingOutcome(invoice_id, file_path, STATUS_ERROR, error=e)

        except Exception as e:
            logger.exception(f"Invoice {invoice_id} failed unexpectedly")
            self._mark_error(invoice_id)
            error = InvoiceManagerError(
                f"Unexpected error: {e}",
                {"type": type(e).__name__}
            )
            return ProcessingOutcome(invoice_id, file_path, STATUS_ERROR, error=error)

        logger.info(f"Invoice {invoice_id} processed: {record!r}")
        return ProcessingOutcome(
            invoice_id,
            file_path,
            STATUS_PROCESSED,
            record=record,
            warnings=list(validation.warnings),
        )

    def _extract(self, text: str) -> Dict[str, Any]:
        self.cooldown.check()
        try:
            return self.extractor.extract(text)
        except QuotaExceededError as e:
            self.cooldown.record(e)
            raise

    def _with_category(self, record: InvoiceRecord, text: str) -> InvoiceRecord:
        if self.cooldown.is_active():
            return record

        category = self.extractor.classify_expense(text, record.provider)
        payload = record.to_payload()
        payload['categoria'] = category
        return self.post_processor.field_normalizer.normalize(payload)

    def _mark_error(self, invoice_id: int) -> None:
        try:
            self.store.set_status(invoice_id, STATUS_ERROR)
        except StorageError as status_error:
            logger.error(f"Could not record error status for invoice {invoice_id}: {status_error}")
