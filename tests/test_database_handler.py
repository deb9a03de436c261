import sqlite3

import pytest

from invoice_manager.analytics import SearchFilters
from invoice_manager.output_handler import InvoiceStore
from invoice_manager.postprocessor import InvoiceItem, InvoiceRecord, normalize_invoice
from invoice_manager.utils.exceptions import DatabaseError, RecordNotFoundError, ValidationError


def sample_record(**overrides):
    payload = {
        "proveedor": "ACME Corp",
        "fecha": "2024-03-03",
        "monto": 1160,
        "numeroFactura": "F-100",
        "categoria": "Servicios",
        "moneda": "MXN",
        "impuestos": 160,
        "subtotal": 1000,
        "items": [{"descripcion": "Soporte técnico", "cantidad": 1, "precioUnitario": 1000, "subtotal": 1000}],
    }
    payload.update(overrides)
    return normalize_invoice(payload)


def test_create_and_get(store):
    invoice_id = store.create("uploads/factura.png")
    invoice = store.get(invoice_id)

    assert invoice.id == invoice_id
    assert invoice.file_path == "uploads/factura.png"
    assert invoice.file_name == "factura.png"
    assert invoice.status == "pending"
    assert invoice.record == InvoiceRecord()


def test_get_unknown_id_raises(store):
    with pytest.raises(RecordNotFoundError):
        store.get(999)


def test_invalid_status_is_rejected(store):
    with pytest.raises(ValidationError):
        store.create("a.pdf", status="done")

    invoice_id = store.create("a.pdf")
    with pytest.raises(ValidationError):
        store.set_status(invoice_id, "archived")


def test_status_transitions(store):
    invoice_id = store.create("a.pdf", status="uploaded")
    store.set_status(invoice_id, "processing")
    assert store.get(invoice_id).status == "processing"

    with pytest.raises(RecordNotFoundError):
        store.set_status(invoice_id + 1, "error")


def test_save_extraction_round_trips_record(store):
    invoice_id = store.create("a.pdf", status="processing")
    record = sample_record()

    store.save_extraction(invoice_id, "FACTURA ACME", record)
    invoice = store.get(invoice_id)

    assert invoice.status == "processed"
    assert invoice.extracted_text == "FACTURA ACME"
    assert invoice.record == record
    assert invoice.record.items[0] == InvoiceItem("Soporte técnico", 1.0, 1000.0, 1000.0)


def test_columns_use_spanish_payload_keys(store):
    invoice_id = store.insert_record(sample_record(), "manual/1_calculator.pdf")

    conn = sqlite3.connect(store.db_path)
    conn.row_factory = sqlite3.Row
    row = conn.execute("SELECT * FROM files WHERE id = ?", (invoice_id,)).fetchone()
    conn.close()

    assert row["proveedor"] == "ACME Corp"
    assert row["monto"] == 1160.0
    assert row["numeroFactura"] == "F-100"
    assert row["status"] == "processed"
    assert '"descripcion": "Soporte técnico"' in row["items"]


def test_update_record(store):
    invoice_id = store.insert_record(sample_record(), "a.pdf")
    store.update_record(invoice_id, sample_record(proveedor="Nuevo Proveedor", monto=50))

    invoice = store.get(invoice_id)
    assert invoice.record.provider == "Nuevo Proveedor"
    assert invoice.record.total_amount == 50.0
    assert invoice.status == "processed"


def test_delete(store):
    invoice_id = store.create("a.pdf")
    store.delete(invoice_id)

    with pytest.raises(RecordNotFoundError):
        store.get(invoice_id)
    with pytest.raises(RecordNotFoundError):
        store.delete(invoice_id)


def test_list_all_newest_first_with_limit(store):
    ids = [store.create(f"{n}.pdf") for n in range(3)]

    assert [invoice.id for invoice in store.list_all()] == list(reversed(ids))
    assert len(store.list_all(limit=2)) == 2


def test_search_delegates_to_filters(store):
    store.insert_record(sample_record(), "acme.pdf")
    store.insert_record(sample_record(proveedor="Otra", numeroFactura="X-1"), "otra.pdf")
    store.create("pendiente.pdf")

    results = store.search(SearchFilters(search_term="acme"))
    assert [invoice.record.provider for invoice in results] == ["ACME Corp"]

    assert len(store.search(SearchFilters(status="pending"))) == 1


def test_get_statistics(store):
    store.insert_record(sample_record(), "a.pdf")
    store.insert_record(sample_record(monto=40), "b.pdf")
    store.create("c.pdf")

    stats = store.get_statistics()
    assert stats["total_records"] == 3
    assert stats["by_status"] == {"processed": 2, "pending": 1}
    assert stats["total_amount"] == pytest.approx(1200.0)
    assert stats["unique_providers"] == 1
    assert store.get_count() == 3


def test_unusable_database_path_raises_database_error(tmp_path):
    (tmp_path / "db_is_dir").mkdir()

    with pytest.raises(DatabaseError):
        InvoiceStore(tmp_path / "db_is_dir")


def test_list_all_zero_limit_returns_nothing(store):
    store.create("a.pdf")
    assert store.list_all(limit=0) == []
