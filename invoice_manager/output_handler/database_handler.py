"""
Database Handler Module.

This module provides SQLite storage for invoice files and their
normalized data.

Features:
    - Automatic schema creation
    - Processing status per file
    - Spanish column names matching the extraction payload
    - Line items stored as a JSON column

Author: ML Engineering Team
"""

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Union

from invoice_manager.config import get_config
from invoice_manager.postprocessor import InvoiceRecord, RECORD_PAYLOAD_KEYS, normalize_invoice
from invoice_manager.utils.logger import get_logger
from invoice_manager.utils.helpers import ensure_directory
from invoice_manager.utils.exceptions import DatabaseError, RecordNotFoundError, ValidationError
from .stored_invoice import (
    STATUS_PENDING,
    STATUS_PROCESSED,
    VALID_STATUSES,
    StoredInvoice,
)

if TYPE_CHECKING:
    from invoice_manager.analytics.search import SearchFilters

# Initialize module logger
logger = get_logger(__name__)


RECORD_COLUMNS = list(RECORD_PAYLOAD_KEYS.values())


class InvoiceStore:
    """
    Handles database operations for stored invoices.

    Every operation opens its own connection, so a store instance can be
    shared freely.

    Attributes:
        db_path: Path to the SQLite database file
        table_name: Name of the invoice table

    Example:
        >>> store = InvoiceStore("data/invoices.db")
        >>> invoice_id = store.create("facturas/luz.pdf")
        >>> store.set_status(invoice_id, "processing")
        >>> store.get(invoice_id).status
        'processing'
    """

    def __init__(self, db_path: Union[str, Path, None] = None) -> None:
        """
        Initialize the store.

        Args:
            db_path: Path to database file. If None, uses configuration.
        """
        if db_path:
            self.db_path = Path(db_path)
        else:
            data_dir = Path(get_config("paths.data_dir", "data"))
            self.db_path = data_dir / get_config("output.database.name", "invoices.db")

        self.table_name = get_config("output.database.table_name", "files")

        ensure_directory(self.db_path.parent)
        self._create_tables()

        logger.info(f"InvoiceStore initialized (db: {self.db_path})")

    @contextmanager
    def _connect(self, operation: str) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise DatabaseError(operation, str(e)) from e

        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(operation, str(e)) from e
        finally:
            conn.close()

    def _create_tables(self) -> None:
        record_columns = ",\n            ".join(
            f"{column} {'REAL' if self._is_numeric(column) else 'TEXT'}"
            for column in RECORD_COLUMNS
        )
        create_sql = f"""
        CREATE TABLE IF NOT EXISTS {self.table_name} (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            file_path TEXT NOT NULL,
            created_at TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT '{STATUS_PENDING}',
            extracted_text TEXT,
            {record_columns},
            items TEXT NOT NULL DEFAULT '[]'
        )
        """

        with self._connect("create tables") as conn:
            conn.execute(create_sql)
            conn.execute(f"""
                CREATE INDEX IF NOT EXISTS idx_{self.table_name}_status
                ON {self.table_name} (status)
            """)
            conn.execute(f"""
                CREATE INDEX IF NOT EXISTS idx_{self.table_name}_fecha
                ON {self.table_name} (fecha)
            """)

        logger.debug("Database tables created/verified")

    @staticmethod
    def _is_numeric(column: str) -> bool:
        return column in ('monto', 'impuestos', 'subtotal', 'descuentos')

    @staticmethod
    def _check_status(status: str) -> None:
        if status not in VALID_STATUSES:
            raise ValidationError("status", status, f"must be one of {', '.join(VALID_STATUSES)}")

    @staticmethod
    def _record_values(record: InvoiceRecord) -> List[Any]:
        payload = record.to_payload()
        values = [payload[column] for column in RECORD_COLUMNS]
        values.append(json.dumps(payload['items'], ensure_ascii=False))
        return values

    @staticmethod
    def _row_to_invoice(row: sqlite3.Row) -> StoredInvoice:
        payload = {column: row[column] for column in RECORD_COLUMNS}
        try:
            payload['items'] = json.loads(row['items'] or '[]')
        except json.JSONDecodeError:
            logger.warning(f"Invoice {row['id']} has unreadable items, ignoring them")
            payload['items'] = []

        return StoredInvoice(
            id=row['id'],
            file_path=row['file_path'],
            created_at=row['created_at'],
            status=row['status'],
            extracted_text=row['extracted_text'],
            record=normalize_invoice(payload),
        )

    def create(self, file_path: str, status: str = STATUS_PENDING) -> int:
        """
        Register a new invoice file.

        Returns:
            The new row id.

        Raises:
            ValidationError: If ``status`` is not a valid status.
        """
        self._check_status(status)

        with self._connect("create") as conn:
            cursor = conn.execute(
                f"INSERT INTO {self.table_name} (file_path, created_at, status) VALUES (?, ?, ?)",
                (str(file_path), datetime.now().isoformat(timespec='seconds'), status)
            )
            invoice_id = cursor.lastrowid

        logger.debug(f"Registered file {file_path} as invoice {invoice_id} ({status})")
        return invoice_id

    def insert_record(
        self,
        record: InvoiceRecord,
        file_path: str,
        status: str = STATUS_PROCESSED,
        extracted_text: Optional[str] = None
    ) -> int:
        """Insert an already-built record (manual entry, calculator)."""
        self._check_status(status)

        columns = ["file_path", "created_at", "status", "extracted_text"] + RECORD_COLUMNS + ["items"]
        values = [
            str(file_path),
            datetime.now().isoformat(timespec='seconds'),
            status,
            extracted_text,
        ] + self._record_values(record)
        placeholders = ", ".join("?" for _ in columns)

        with self._connect("insert_record") as conn:
            cursor = conn.execute(
                f"INSERT INTO {self.table_name} ({', '.join(columns)}) VALUES ({placeholders})",
                values
            )
            invoice_id = cursor.lastrowid

        logger.info(f"Inserted invoice {invoice_id}: {record!r}")
        return invoice_id

    def get(self, invoice_id: int) -> StoredInvoice:
        """
        Retrieve one invoice.

        Raises:
            RecordNotFoundError: If the id does not exist.
        """
        with self._connect("get") as conn:
            row = conn.execute(
                f"SELECT * FROM {self.table_name} WHERE id = ?",
                (invoice_id,)
            ).fetchone()

        if row is None:
            raise RecordNotFoundError(invoice_id)
        return self._row_to_invoice(row)

    def list_all(self, limit: Optional[int] = None) -> List[StoredInvoice]:
        """All invoices, newest first."""
        query = f"SELECT * FROM {self.table_name} ORDER BY created_at DESC, id DESC"
        params: List[Any] = []
        if limit is not None:
            query += " LIMIT ?"
            params.append(int(limit))

        with self._connect("list_all") as conn:
            rows = conn.execute(query, params).fetchall()

        return [self._row_to_invoice(row) for row in rows]

    def _update(self, operation: str, invoice_id: int, assignments: Dict[str, Any]) -> None:
        set_clause = ", ".join(f"{column} = ?" for column in assignments)
        with self._connect(operation) as conn:
            cursor = conn.execute(
                f"UPDATE {self.table_name} SET {set_clause} WHERE id = ?",
                list(assignments.values()) + [invoice_id]
            )
            updated = cursor.rowcount > 0

        if not updated:
            raise RecordNotFoundError(invoice_id)

    def set_status(self, invoice_id: int, status: str) -> None:
        """
        Change an invoice's processing status.

        Raises:
            ValidationError: If ``status`` is not a valid status.
            RecordNotFoundError: If the id does not exist.
        """
        self._check_status(status)
        self._update("set_status", invoice_id, {'status': status})
        logger.debug(f"Invoice {invoice_id} -> {status}")

    def save_extraction(self, invoice_id: int, text: str, record: InvoiceRecord) -> None:
        """Store the extracted text and normalized record and mark the invoice processed."""
        assignments: Dict[str, Any] = {'status': STATUS_PROCESSED, 'extracted_text': text}
        assignments.update(zip(RECORD_COLUMNS + ['items'], self._record_values(record)))

        self._update("save_extraction", invoice_id, assignments)
        logger.info(f"Saved extraction for invoice {invoice_id}")

    def update_record(self, invoice_id: int, record: InvoiceRecord) -> None:
        """Replace the normalized fields of an invoice (manual edit)."""
        assignments = dict(zip(RECORD_COLUMNS + ['items'], self._record_values(record)))
        self._update("update_record", invoice_id, assignments)
        logger.info(f"Updated invoice {invoice_id}")

    def delete(self, invoice_id: int) -> None:
        """
        Delete an invoice.

        Raises:
            RecordNotFoundError: If the id does not exist.
        """
        with self._connect("delete") as conn:
            cursor = conn.execute(
                f"DELETE FROM {self.table_name} WHERE id = ?",
                (invoice_id,)
            )
            deleted = cursor.rowcount > 0

        if not deleted:
            raise RecordNotFoundError(invoice_id)
        logger.info(f"Deleted invoice {invoice_id}")

    def search(self, filters: 'SearchFilters') -> List[StoredInvoice]:
        """Invoices matching ``filters``, newest first."""
        return filters.apply(self.list_all())

    def get_count(self) -> int:
        with self._connect("get_count") as conn:
            return conn.execute(f"SELECT COUNT(*) FROM {self.table_name}").fetchone()[0]

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get statistics about the stored data.

        Returns:
            Dictionary with record counts per status, the processed total
            amount and the number of distinct providers.
        """
        stats: Dict[str, Any] = {}

        with self._connect("get_statistics") as conn:
            stats['total_records'] = conn.execute(
                f"SELECT COUNT(*) FROM {self.table_name}"
            ).fetchone()[0]

            rows = conn.execute(
                f"SELECT status, COUNT(*) AS n FROM {self.table_name} GROUP BY status"
            ).fetchall()
            stats['by_status'] = {row['status']: row['n'] for row in rows}

            stats['total_amount'] = conn.execute(
                f"SELECT COALESCE(SUM(monto), 0) FROM {self.table_name} WHERE status = ?",
                (STATUS_PROCESSED,)
            ).fetchone()[0]

            stats['unique_providers'] = conn.execute(
                f"SELECT COUNT(DISTINCT proveedor) FROM {self.table_name}"
            ).fetchone()[0]

        return stats
