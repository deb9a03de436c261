import dataclasses
from types import SimpleNamespace

import pytest
from google.genai import errors as genai_errors

from invoice_manager.model_inference import InvoiceExtractor, parse_retry_after
from invoice_manager.utils.exceptions import (
    ExtractionFormatError,
    InferenceError,
    ModelConfigurationError,
    QuotaExceededError,
)


class FakeModels:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def generate_content(self, model, contents):
        self.calls.append({"model": model, "contents": contents})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return SimpleNamespace(text=response)


def make_extractor(settings, *responses):
    models = FakeModels(responses)
    return InvoiceExtractor(settings, client=SimpleNamespace(models=models)), models


def quota_error(retry_delay=None, message="Resource has been exhausted (e.g. check quota)."):
    error = {"code": 429, "message": message, "status": "RESOURCE_EXHAUSTED"}
    if retry_delay is not None:
        error["details"] = [{
            "@type": "type.googleapis.com/google.rpc.RetryInfo",
            "retryDelay": retry_delay,
        }]
    return genai_errors.ClientError(429, {"error": error})


def test_extract_returns_parsed_payload(settings):
    extractor, models = make_extractor(
        settings,
        'Aquí tienes:\n```json\n{"proveedor": "ACME", "monto": "1000"}\n```'
    )

    payload = extractor.extract("FACTURA ACME TOTAL 1000")

    assert payload == {"proveedor": "ACME", "monto": "1000"}
    assert models.calls[0]["model"] == "gemini-test"
    prompt = models.calls[0]["contents"]
    assert '"""\nFACTURA ACME TOTAL 1000\n"""' in prompt
    assert "IMPORTANTE: Responde SOLO con el JSON válido" in prompt


def test_extract_without_json_raises_format_error(settings):
    extractor, _ = make_extractor(settings, "No puedo leer esta factura.")
    with pytest.raises(ExtractionFormatError):
        extractor.extract("texto")


def test_extract_empty_response_raises_format_error(settings):
    extractor, _ = make_extractor(settings, None)
    with pytest.raises(ExtractionFormatError):
        extractor.extract("texto")


def test_quota_error_uses_retry_delay(settings):
    extractor, _ = make_extractor(settings, quota_error(retry_delay="37s"))

    with pytest.raises(QuotaExceededError) as exc_info:
        extractor.extract("texto")
    assert exc_info.value.retry_after == 37.0


def test_quota_error_uses_retry_hint_in_message(settings):
    extractor, _ = make_extractor(settings, quota_error(message="Quota exceeded. Please retry in 12.5s."))

    with pytest.raises(QuotaExceededError) as exc_info:
        extractor.extract("texto")
    assert exc_info.value.retry_after == 12.5


def test_quota_error_falls_back_to_configured_delay(settings):
    settings = dataclasses.replace(settings, default_retry_after=90.0)
    extractor, _ = make_extractor(settings, quota_error())

    with pytest.raises(QuotaExceededError) as exc_info:
        extractor.extract("texto")
    assert exc_info.value.retry_after == 90.0


def test_parse_retry_after_default():
    assert parse_retry_after(quota_error(), 15.0) == 15.0


def test_invalid_api_key_maps_to_configuration_error(settings):
    error = genai_errors.ClientError(400, {"error": {
        "code": 400,
        "message": "API key not valid. Please pass a valid API key.",
        "status": "INVALID_ARGUMENT",
    }})
    extractor, _ = make_extractor(settings, error)

    with pytest.raises(ModelConfigurationError):
        extractor.extract("texto")


def test_other_api_errors_map_to_inference_error(settings):
    error = genai_errors.ServerError(503, {"error": {
        "code": 503, "message": "The model is overloaded.", "status": "UNAVAILABLE",
    }})
    extractor, _ = make_extractor(settings, error)

    with pytest.raises(InferenceError):
        extractor.extract("texto")


def test_transport_errors_map_to_inference_error(settings):
    extractor, _ = make_extractor(settings, ConnectionError("network down"))
    with pytest.raises(InferenceError):
        extractor.extract("texto")


def test_missing_api_key_raises_configuration_error(settings):
    extractor = InvoiceExtractor(dataclasses.replace(settings, google_api_key=""))
    with pytest.raises(ModelConfigurationError):
        extractor.extract("texto")


@pytest.mark.parametrize("answer, expected", [
    ("Servicios", "Servicios"),
    ("  transporte.\n", "Transporte"),
    ("Oficina (papelería, equipos)", "Oficina"),
    ("No estoy seguro", "Otros"),
])
def test_classify_expense(settings, answer, expected):
    extractor, models = make_extractor(settings, answer)
    assert extractor.classify_expense("Gasolina 40 litros", "PEMEX") == expected
    assert "Proveedor: PEMEX" in models.calls[0]["contents"]


def test_classify_expense_falls_back_on_failure(settings):
    extractor, _ = make_extractor(settings, quota_error(retry_delay="5s"))
    assert extractor.classify_expense("texto", None) == "Otros"


def test_extract_basic_data(settings):
    extractor, _ = make_extractor(settings, '{"proveedor": "ACME", "fecha": "2024-03-03", "monto": "50"}')
    assert extractor.extract_basic_data("texto") == {"proveedor": "ACME", "fecha": "2024-03-03", "monto": "50"}


def test_extract_basic_data_returns_none_on_failure(settings):
    extractor, _ = make_extractor(settings, "sin json")
    assert extractor.extract_basic_data("texto") is None
