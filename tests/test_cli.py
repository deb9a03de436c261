import json

import pytest

from main import main, parse_arguments

from invoice_manager.output_handler import InvoiceStore
from invoice_manager.postprocessor import normalize_invoice


def test_parse_arguments_defaults():
    args = parse_arguments([])
    assert args.input is None
    assert args.status == "all"
    assert args.evolution is None


def test_nothing_to_do(tmp_path, capsys):
    assert main(["--db", str(tmp_path / "cli.db"), "--quiet"]) == 2
    assert "Nothing to do" in capsys.readouterr().out


def test_list_search_and_stats(tmp_path, capsys):
    db = tmp_path / "cli.db"
    store = InvoiceStore(db)
    store.insert_record(normalize_invoice({"proveedor": "ACME", "fecha": "2024-03-03", "monto": 100}), "acme.pdf")
    store.create("otra.png")

    assert main(["--db", str(db), "--quiet", "--list"]) == 0
    output = capsys.readouterr().out
    assert "acme.pdf" in output
    assert "otra.png" in output

    assert main(["--db", str(db), "--quiet", "--search", "acme"]) == 0
    output = capsys.readouterr().out
    assert "acme.pdf" in output
    assert "otra.png" not in output

    assert main(["--db", str(db), "--quiet", "--stats", "--evolution", "all"]) == 0
    output = capsys.readouterr().out
    assert "Processed:        1" in output
    assert "mar 2024" in output


def test_delete_unknown_invoice_fails(tmp_path, capsys):
    assert main(["--db", str(tmp_path / "cli.db"), "--quiet", "--delete", "7"]) == 1
    assert "Error" in capsys.readouterr().err


def test_show_prints_record_json(tmp_path, capsys):
    db = tmp_path / "cli.db"
    invoice_id = InvoiceStore(db).insert_record(
        normalize_invoice({"proveedor": "Papelería Sol", "monto": "250"}), "sol.pdf"
    )

    assert main(["--db", str(db), "--quiet", "--show", str(invoice_id)]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["proveedor"] == "Papelería Sol"
    assert payload["monto"] == 250.0
    assert payload["items"] == []


def test_json_listing_and_stats(tmp_path, capsys):
    db = tmp_path / "cli.db"
    store = InvoiceStore(db)
    store.insert_record(normalize_invoice({"proveedor": "ACME", "monto": 100}), "acme.pdf")
    store.insert_record(normalize_invoice({"proveedor": "CFE", "monto": 50}), "cfe.pdf")

    assert main(["--db", str(db), "--quiet", "--list", "--limit", "1", "--json"]) == 0
    listing = json.loads(capsys.readouterr().out)
    assert [row["file_path"] for row in listing] == ["cfe.pdf"]
    assert listing[0]["proveedor"] == "CFE"

    assert main(["--db", str(db), "--quiet", "--stats", "--json"]) == 0
    stats = json.loads(capsys.readouterr().out)
    assert stats["processed_files"] == 2
    assert stats["total_amount"] == 150.0


def test_limit_below_one_is_rejected(tmp_path):
    with pytest.raises(SystemExit) as exc_info:
        parse_arguments(["--list", "--limit", "0"])
    assert exc_info.value.code == 2


def test_input_json_reports_outcomes_and_failure_exit_code(tmp_path, capsys, monkeypatch):
    import main as cli
    from invoice_manager.pipeline.invoice_pipeline import ProcessingOutcome
    from invoice_manager.utils.exceptions import RecognitionError

    outcomes = [
        ProcessingOutcome(1, "a.pdf", "processed", record=normalize_invoice({"proveedor": "ACME"})),
        ProcessingOutcome(2, "b.png", "error", error=RecognitionError("b.png")),
    ]
    monkeypatch.setattr(cli, "run_processing", lambda input_path, settings: outcomes)

    assert main(["--db", str(tmp_path / "cli.db"), "--quiet", "--input", "x", "--json"]) == 1
    report = json.loads(capsys.readouterr().out)
    assert [row["status"] for row in report] == ["processed", "error"]
    assert report[0]["record"]["proveedor"] == "ACME"
    assert report[1]["record"] is None
    assert report[1]["error"]
