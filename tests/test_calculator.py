from datetime import date

import pytest

from invoice_manager.calculator import InvoiceCalculator
from invoice_manager.postprocessor import InvoiceItem
from invoice_manager.utils.exceptions import ValidationError


def test_starts_with_one_empty_item():
    calc = InvoiceCalculator()
    assert len(calc.items) == 1
    assert calc.items[0].quantity == 1.0
    assert calc.items[0].unit_price == 0.0
    assert calc.tax_rate == 0.16
    assert calc.currency == "MXN"


def test_totals():
    calc = InvoiceCalculator(tax_rate=0.16)
    calc.update_item(calc.items[0].id, description="Consultoría", quantity=2, unit_price=500)
    calc.add_item("Licencia", 1, 250)

    totals = calc.totals()
    assert totals.subtotal == 1250.0
    assert totals.taxes == pytest.approx(200.0)
    assert totals.total == pytest.approx(1450.0)


def test_remove_item_keeps_last_one():
    calc = InvoiceCalculator()
    first = calc.items[0].id
    second = calc.add_item("Otro", 1, 10)

    assert calc.remove_item(first)
    assert [item.id for item in calc.items] == [second]
    assert not calc.remove_item(second)
    assert not calc.remove_item(12345)


def test_update_item_validation():
    calc = InvoiceCalculator()
    with pytest.raises(ValidationError):
        calc.update_item(99, quantity=2)
    with pytest.raises(ValidationError):
        calc.update_item(calc.items[0].id, color="red")


def test_to_record():
    calc = InvoiceCalculator(tax_rate=0.08, currency="usd")
    calc.update_item(calc.items[0].id, description="  Servicio  web ", quantity=3, unit_price=100)

    record = calc.to_record("  Mi   Proveedor ", today=date(2024, 3, 3))

    assert record.provider == "Mi Proveedor"
    assert record.issue_date == "2024-03-03"
    assert record.subtotal_amount == 300.0
    assert record.tax_amount == pytest.approx(24.0)
    assert record.total_amount == pytest.approx(324.0)
    assert record.currency == "USD"
    assert record.category == "Manual"
    assert record.payment_method == "Por definir"
    assert record.items == (InvoiceItem("Servicio web", 3.0, 100.0, 300.0),)


@pytest.mark.parametrize("provider", ["", "   ", None])
def test_to_record_requires_provider(provider):
    with pytest.raises(ValidationError):
        InvoiceCalculator().to_record(provider)


def test_save_stores_processed_invoice_and_resets(store):
    calc = InvoiceCalculator()
    calc.update_item(calc.items[0].id, description="Café", quantity=2, unit_price=50)
    calc.add_item("Azúcar", 1, 20)

    invoice_id = calc.save(store, "Cafetería Central", today=date(2024, 3, 3))

    stored = store.get(invoice_id)
    assert stored.status == "processed"
    assert stored.file_path.startswith("manual/")
    assert stored.file_path.endswith("_calculator.pdf")
    assert stored.record.total_amount == pytest.approx(139.2)
    assert len(stored.record.items) == 2

    assert len(calc.items) == 1
    assert calc.items[0].description == ""
