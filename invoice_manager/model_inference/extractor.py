"""
Invoice Extractor Module.

This module provides the InvoiceExtractor class that sends OCR text to a
hosted Gemini model and returns the raw structured payload.

Approach:
    A single prompt asks for every invoice field as a JSON object with the
    external (Spanish) record keys. The response is parsed leniently and
    handed, untyped, to the post-processor.

Error mapping:
    - quota exhausted (HTTP 429 / RESOURCE_EXHAUSTED) -> QuotaExceededError
    - missing or rejected API key -> ModelConfigurationError
    - no usable JSON in the response -> ExtractionFormatError
    - anything else from the service -> InferenceError

Author: ML Engineering Team
"""

import re
import time
from typing import Any, Dict, Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from invoice_manager.config import AppSettings
from invoice_manager.utils.logger import get_logger
from invoice_manager.utils.exceptions import (
    InvoiceManagerError,
    InferenceError,
    ModelConfigurationError,
    QuotaExceededError,
)
from .prompts import (
    DEFAULT_CATEGORY,
    EXPENSE_CATEGORIES,
    build_basic_prompt,
    build_classify_prompt,
    build_invoice_prompt,
)
from .response_parser import extract_json_object

# Initialize module logger
logger = get_logger(__name__)


RETRY_IN_RE = re.compile(r'retry in\s+([\d.]+)\s*s', re.IGNORECASE)
DURATION_RE = re.compile(r'^\s*([\d.]+)\s*s?\s*$')


def parse_retry_after(error: genai_errors.APIError, default: float) -> float:
    """
    Work out how long to wait after a quota error.

    Looks for a ``retryDelay`` ("37s") anywhere in the error details, then
    for a "retry in 37.2s" hint in the message.

    Args:
        error: The API error raised by the Gemini client.
        default: Seconds to use when the error says nothing.

    Returns:
        Seconds to wait.
    """
    delay = _find_retry_delay(getattr(error, 'details', None))
    if delay is not None:
        match = DURATION_RE.match(delay)
        if match:
            return float(match.group(1))

    match = RETRY_IN_RE.search(str(getattr(error, 'message', None) or error))
    if match:
        return float(match.group(1))

    return default


def _find_retry_delay(node: Any) -> Optional[str]:
    if isinstance(node, dict):
        value = node.get('retryDelay')
        if isinstance(value, str):
            return value
        children = node.values()
    elif isinstance(node, list):
        children = node
    else:
        return None

    for child in children:
        found = _find_retry_delay(child)
        if found is not None:
            return found
    return None


def _is_quota_error(error: genai_errors.APIError) -> bool:
    return error.code == 429 or getattr(error, 'status', None) == 'RESOURCE_EXHAUSTED'


def _is_api_key_error(error: genai_errors.APIError) -> bool:
    message = str(getattr(error, 'message', None) or error)
    return 'API key not valid' in message or 'API_KEY_INVALID' in str(error)


class InvoiceExtractor:
    """
    Gemini-backed invoice field extractor.

    Attributes:
        settings: Explicit runtime settings (API key, model, timeout)
        model_name: Gemini model identifier

    Example:
        >>> extractor = InvoiceExtractor(load_settings())
        >>> payload = extractor.extract(ocr_text)
        >>> payload.get("proveedor")
        'ACME Corp'
    """

    def __init__(
        self,
        settings: AppSettings,
        client: Optional[Any] = None
    ) -> None:
        """
        Initialize the extractor.

        Args:
            settings: Application settings.
            client: Pre-built client exposing ``models.generate_content``.
                If None, a ``genai.Client`` is created on first use.
        """
        self.settings = settings
        self.model_name = settings.model_name
        self._client = client

        logger.info(f"InvoiceExtractor initialized with model: {self.model_name}")

    @property
    def client(self) -> Any:
        if self._client is None:
            if not self.settings.has_api_key:
                raise ModelConfigurationError("GOOGLE_API_KEY is not set")

            self._client = genai.Client(
                api_key=self.settings.google_api_key,
                http_options=genai_types.HttpOptions(
                    timeout=int(self.settings.model_timeout * 1000)
                ),
            )
        return self._client

    def generate(self, prompt: str) -> str:
        """
        Send a prompt to the model and return its text.

        Raises:
            QuotaExceededError: Service quota exhausted.
            ModelConfigurationError: API key missing or rejected.
            InferenceError: Any other service failure.
        """
        start_time = time.time()

        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=prompt
            )
        except genai_errors.APIError as e:
            raise self._map_api_error(e) from e
        except InvoiceManagerError:
            raise
        except Exception as e:
            logger.error(f"Model call failed: {e}")
            raise InferenceError(str(e)) from e

        logger.debug(f"Model responded in {time.time() - start_time:.2f}s")
        return response.text or ""

    def _map_api_error(self, error: genai_errors.APIError) -> InvoiceManagerError:
        if _is_quota_error(error):
            retry_after = parse_retry_after(error, self.settings.default_retry_after)
            logger.warning(f"Model quota exceeded, retry after {retry_after:.0f}s")
            return QuotaExceededError(retry_after, getattr(error, 'message', None))

        if _is_api_key_error(error):
            logger.error("Gemini rejected the configured API key")
            return ModelConfigurationError("API key not valid")

        logger.error(f"Model call failed: {error}")
        return InferenceError(str(error))

    def extract(self, text: str) -> Dict[str, Any]:
        """
        Extract the raw invoice payload from OCR text.

        Args:
            text: Plain text of the invoice.

        Returns:
            Parsed JSON object (not yet normalized).

        Raises:
            ExtractionFormatError: The response held no usable JSON object.
            QuotaExceededError, ModelConfigurationError, InferenceError:
                See ``generate``.
        """
        response_text = self.generate(build_invoice_prompt(text))
        payload = extract_json_object(response_text)

        logger.info(f"Extraction complete: {len(payload)} keys returned")
        return payload

    def classify_expense(self, text: str, provider: Optional[str]) -> str:
        """
        Ask the model for an expense category.

        Returns one of ``EXPENSE_CATEGORIES``; any failure or unrecognized
        answer yields ``"Otros"``.
        """
        try:
            answer = self.generate(build_classify_prompt(text, provider or ""))
        except InvoiceManagerError as e:
            logger.warning(f"Expense classification failed: {e}")
            return DEFAULT_CATEGORY

        cleaned = answer.strip().strip('.*"\'').strip().lower()
        for category in EXPENSE_CATEGORIES:
            if cleaned.startswith(category.lower()):
                return category

        logger.debug(f"Unrecognized category answer: {answer!r}")
        return DEFAULT_CATEGORY

    def extract_basic_data(self, text: str) -> Optional[Dict[str, Any]]:
        """
        Extract only provider, date and total.

        Returns:
            Parsed JSON object, or None on any failure.
        """
        try:
            return extract_json_object(self.generate(build_basic_prompt(text)))
        except InvoiceManagerError as e:
            logger.warning(f"Basic extraction failed: {e}")
            return None
