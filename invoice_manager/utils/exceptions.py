"""
Custom Exceptions Module.

This module defines all custom exceptions used throughout the invoice
manager. Using specific exceptions lets callers surface the right message
to the user (retry with a clearer image, retry the extraction, wait for
the quota cooldown).

Exception Hierarchy:
    InvoiceManagerError (base)
    ├── InputError
    │   ├── UnsupportedFileTypeError
    │   ├── InputFileNotFoundError
    │   └── CorruptedFileError
    ├── OCRError
    │   ├── OCREngineNotAvailableError
    │   └── RecognitionError
    ├── ModelError
    │   ├── ModelConfigurationError
    │   ├── InferenceError
    │   ├── ExtractionFormatError
    │   └── QuotaExceededError
    ├── PostProcessingError
    │   └── ValidationError
    └── StorageError
        ├── DatabaseError
        └── RecordNotFoundError
"""

from typing import Optional


class InvoiceManagerError(Exception):
    """
    Base exception for all invoice manager errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(InvoiceManagerError):
    """Base exception for input handling errors."""
    pass


class UnsupportedFileTypeError(InputError):
    """
    Raised when an unsupported file type is provided.

    Example:
        >>> raise UnsupportedFileTypeError(".doc", [".pdf", ".jpg"])
    """

    def __init__(self, file_type: str, supported_types: list):
        message = f"Unsupported file type: '{file_type}'"
        details = {"file_type": file_type, "supported_types": sorted(supported_types)}
        super().__init__(message, details)


class InputFileNotFoundError(InputError):
    """Raised when an input file cannot be found."""

    def __init__(self, filepath: str):
        message = f"File not found: {filepath}"
        details = {"filepath": filepath}
        super().__init__(message, details)


class CorruptedFileError(InputError):
    """Raised when a file appears to be corrupted or unreadable."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Corrupted or unreadable file: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# OCR ERRORS
# =============================================================================

class OCRError(InvoiceManagerError):
    """Base exception for OCR-related errors."""
    pass


class OCREngineNotAvailableError(OCRError):
    """Raised when the configured OCR engine is not available."""

    def __init__(self, engine_name: str):
        message = f"OCR engine not available: {engine_name}"
        details = {"engine": engine_name}
        super().__init__(message, details)


class RecognitionError(OCRError):
    """
    Raised when text recognition fails for a document.

    The user should retry with a clearer image; the pipeline never
    retries automatically.
    """

    USER_MESSAGE = "Error al procesar la imagen. Intenta con una imagen más clara."

    def __init__(self, filepath: str, reason: str = None):
        message = f"Text recognition failed for: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# MODEL ERRORS
# =============================================================================

class ModelError(InvoiceManagerError):
    """Base exception for structured-extraction errors."""
    pass


class ModelConfigurationError(ModelError):
    """Raised when the Gemini client is missing or rejects its API key."""

    def __init__(self, reason: str):
        message = "Generative model is not configured correctly"
        details = {"reason": reason}
        super().__init__(message, details)


class InferenceError(ModelError):
    """Raised when the model call fails for any other reason."""

    def __init__(self, reason: str = None):
        message = "Model inference failed"
        details = {"reason": reason}
        super().__init__(message, details)


class ExtractionFormatError(ModelError):
    """
    Raised when the model response holds no usable JSON object.

    Covers three cases: no ``{...}`` block, a block that does not parse,
    and a parsed value that is not an object.
    """

    USER_MESSAGE = "La IA no pudo generar una respuesta JSON válida. Intenta de nuevo."

    def __init__(self, reason: str, raw_response: Optional[str] = None):
        message = "Could not extract structured data from model response"
        details = {"reason": reason}
        if raw_response is not None:
            details["raw_response"] = raw_response[:200]
        super().__init__(message, details)


class QuotaExceededError(ModelError):
    """
    Raised when the model service reports its quota is exhausted.

    Attributes:
        retry_after: Seconds to wait before the next attempt.
    """

    def __init__(self, retry_after: float, reason: str = None):
        self.retry_after = max(0.0, float(retry_after))
        message = f"Model quota exceeded, retry in {self.retry_after:.0f}s"
        details = {"retry_after": self.retry_after, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# POST-PROCESSING ERRORS
# =============================================================================

class PostProcessingError(InvoiceManagerError):
    """Base exception for post-processing errors."""
    pass


class ValidationError(PostProcessingError):
    """Raised when caller-supplied data fails validation."""

    def __init__(self, field: str, value, reason: str = None):
        message = f"Validation failed for field '{field}'"
        details = {"field": field, "value": value, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# STORAGE ERRORS
# =============================================================================

class StorageError(InvoiceManagerError):
    """Base exception for persistence errors."""
    pass


class DatabaseError(StorageError):
    """Raised when database operations fail."""

    def __init__(self, operation: str, reason: str = None):
        message = f"Database operation failed: {operation}"
        details = {"operation": operation, "reason": reason}
        super().__init__(message, details)


class RecordNotFoundError(StorageError):
    """Raised when a stored invoice id does not exist."""

    def __init__(self, record_id: int):
        message = f"Invoice record not found: {record_id}"
        details = {"id": record_id}
        super().__init__(message, details)


__all__ = [
    'InvoiceManagerError',
    'InputError',
    'UnsupportedFileTypeError',
    'InputFileNotFoundError',
    'CorruptedFileError',
    'OCRError',
    'OCREngineNotAvailableError',
    'RecognitionError',
    'ModelError',
    'ModelConfigurationError',
    'InferenceError',
    'ExtractionFormatError',
    'QuotaExceededError',
    'PostProcessingError',
    'ValidationError',
    'StorageError',
    'DatabaseError',
    'RecordNotFoundError',
]
