import math
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from invoice_manager.postprocessor import (
    AmountNormalizer,
    CurrencyNormalizer,
    DateNormalizer,
    FieldNormalizer,
    InvoiceItem,
    InvoiceRecord,
    PostProcessor,
    normalize_invoice,
)


@pytest.mark.parametrize("raw, expected", [
    ("$1,234.50", 1234.5),
    ("1234.50 MXN", 1234.5),
    ("€ 99", 99.0),
    (500, 500.0),
    (12.75, 12.75),
    (Decimal("3.10"), 3.1),
    ("1.2.3", 1.2),
])
def test_amount_accepts_numbers_and_currency_strings(raw, expected):
    assert AmountNormalizer().to_float(raw) == expected


@pytest.mark.parametrize("raw", [
    -5, "-5.00", -0.01, "abc", "", "$", None, True, False,
    math.nan, math.inf, "-", [], {"monto": 1},
])
def test_amount_rejects_negative_and_unparseable(raw):
    assert AmountNormalizer().to_float(raw) is None


def test_amount_negative_zero_is_plain_zero():
    value = AmountNormalizer().to_float(-0.0)
    assert value == 0.0
    assert math.copysign(1.0, value) == 1.0


@pytest.mark.parametrize("raw, expected", [
    ("2024-03-03", "2024-03-03"),
    ("March 3, 2024", "2024-03-03"),
    ("2024-03-03T23:30:00-06:00", "2024-03-03"),
    (date(2024, 1, 15), "2024-01-15"),
    (datetime(2024, 1, 15, 10, 30), "2024-01-15"),
    (0, None),
    (1709424000000, "2024-03-03"),
])
def test_date_normalization(raw, expected):
    assert DateNormalizer().normalize(raw) == expected


@pytest.mark.parametrize("raw", ["not-a-date", "", "   ", None, True, [], {}])
def test_date_rejects_unparseable(raw):
    assert DateNormalizer().normalize(raw) is None


def test_date_epoch_millis_is_utc():
    millis = datetime(2024, 12, 31, 23, 0, tzinfo=timezone.utc).timestamp() * 1000
    assert DateNormalizer().normalize(millis) == "2024-12-31"


@pytest.mark.parametrize("raw, expected", [
    (" pesos ", "MXN"),
    ("PESOS", "MXN"),
    ("Peso", "MXN"),
    ("mxn", "MXN"),
    ("dolares", "USD"),
    ("$", "USD"),
    ("euro", "EUR"),
    ("yen", None),
    ("US$", None),
    (840, None),
    (None, None),
])
def test_currency_aliases(raw, expected):
    assert CurrencyNormalizer().normalize(raw) == expected


def test_text_fields_trim_and_collapse_whitespace():
    record = normalize_invoice({
        "proveedor": "  ACME \n\t  Corp  ",
        "numeroFactura": "   ",
        "metodoPago": 42,
        "direccionProveedor": "Av.  Reforma   123",
    })
    assert record.provider == "ACME Corp"
    assert record.invoice_number is None
    assert record.payment_method is None
    assert record.provider_address == "Av. Reforma 123"


def test_tax_id_length_boundary():
    assert normalize_invoice({"rfcProveedor": "ABC123456"}).provider_tax_id is None
    assert normalize_invoice({"rfcProveedor": "ABC1234567"}).provider_tax_id == "ABC1234567"
    assert normalize_invoice({"rfcProveedor": "  XAXX  010101000 "}).provider_tax_id == "XAXX 010101000"


def test_scenario_a_full_payload():
    record = normalize_invoice({
        "proveedor": "  ACME   Corp  ",
        "monto": "$1,000.00",
        "moneda": "USD",
        "items": [{"descripcion": "Widget", "cantidad": "2", "precioUnitario": "500"}],
    })

    assert record.provider == "ACME Corp"
    assert record.total_amount == 1000.0
    assert record.currency == "USD"
    assert record.items == (InvoiceItem(description="Widget", quantity=2.0, unit_price=500.0, subtotal=None),)


def test_scenario_b_negative_total_and_short_tax_id():
    record = normalize_invoice({"monto": -50, "rfcProveedor": "ABC123"})
    assert record.total_amount is None
    assert record.provider_tax_id is None


def test_scenario_c_empty_payload():
    record = normalize_invoice({})
    assert all(value is None for value in record.fields.values())
    assert record.items == ()


@pytest.mark.parametrize("raw", [None, "texto", 42, ["a"], True])
def test_non_mapping_payload_gives_empty_record(raw):
    assert normalize_invoice(raw) == InvoiceRecord()


def test_items_keep_order_and_tolerate_garbage():
    record = normalize_invoice({
        "items": [
            {"descripcion": "B", "subtotal": "10"},
            "not an item",
            {"descripcion": None, "cantidad": -1},
            {"descripcion": "A", "precioUnitario": 3},
        ]
    })

    assert [item.description for item in record.items] == ["B", "", "", "A"]
    assert record.items[0].subtotal == 10.0
    assert record.items[1] == InvoiceItem()
    assert record.items[2].quantity is None
    assert record.items[3].unit_price == 3.0


def test_items_must_be_a_list():
    assert normalize_invoice({"items": {"descripcion": "x"}}).items == ()
    assert normalize_invoice({"items": "x"}).items == ()


def test_normalization_is_idempotent():
    record = normalize_invoice({
        "proveedor": "Servicios  Globales",
        "fecha": "March 3, 2024",
        "monto": "1,160.00",
        "numeroFactura": "F-001",
        "categoria": "Servicios",
        "moneda": "pesos",
        "impuestos": "160",
        "subtotal": "1000",
        "descuentos": 0,
        "fechaVencimiento": "2024-04-02",
        "metodoPago": "transferencia",
        "direccionProveedor": "Calle 1",
        "rfcProveedor": "SGL010101AB1",
        "items": [{"descripcion": "Soporte", "cantidad": 1, "precioUnitario": 1000, "subtotal": 1000}],
    })

    assert normalize_invoice(record.to_payload()) == record
    assert FieldNormalizer().normalize(record) == record


def test_record_payload_uses_spanish_keys():
    payload = InvoiceRecord(provider="ACME", total_amount=10.0).to_payload()
    assert payload["proveedor"] == "ACME"
    assert payload["monto"] == 10.0
    assert payload["rfcProveedor"] is None
    assert payload["items"] == []


def test_post_processor_warns_when_no_basic_fields():
    record, validation = PostProcessor().process({"moneda": "MXN"})
    assert record.currency == "MXN"
    assert validation.field_results == {
        "provider": (False, "not extracted"),
        "issue_date": (False, "not extracted"),
        "total_amount": (False, "not extracted"),
    }
    assert len(validation.warnings) == 1
    assert "No basic fields found" in validation.warnings[0]


def test_post_processor_warns_on_due_date_before_issue_date():
    _, validation = PostProcessor().process({
        "proveedor": "ACME",
        "fecha": "2024-03-10",
        "fechaVencimiento": "2024-03-01",
    })
    assert validation.warnings == ["Due date is before issue date"]


def test_post_processor_clean_record_has_no_warnings():
    _, validation = PostProcessor().process({"proveedor": "ACME", "monto": 5})
    assert validation.warnings == []
    assert validation.field_results == {"issue_date": (False, "not extracted")}
