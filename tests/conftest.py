import logging
from pathlib import Path

import pytest

from invoice_manager.config import AppSettings
from invoice_manager.output_handler import InvoiceStore
from invoice_manager.utils.logger import ROOT_LOGGER_NAME


@pytest.fixture
def settings(tmp_path: Path) -> AppSettings:
    return AppSettings(
        google_api_key="test-key",
        model_name="gemini-test",
        model_timeout=5,
        default_retry_after=60.0,
        database_path=tmp_path / "invoices.db",
        ocr_language="spa",
    )


@pytest.fixture
def store(tmp_path: Path) -> InvoiceStore:
    return InvoiceStore(tmp_path / "invoices.db")


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logging.getLogger(ROOT_LOGGER_NAME).handlers.clear()
