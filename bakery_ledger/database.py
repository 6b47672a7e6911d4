# bakery_ledger/database.py
import logging
import sqlite3
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from pydantic import ValidationError

from .exceptions import InvalidOperation, RecordTooLarge, StorageError
from .models import MAX_PRODUCT_ID, Category, Product

# This file holds the durable id counter, the product records and the lock
# that serialises access to both.

logger = logging.getLogger(__name__)

# Upper bound on one encoded Product record, in bytes.
MAX_RECORD_SIZE = 1024

_SCHEMA = """
CREATE TABLE IF NOT EXISTS id_counter (
    slot INTEGER PRIMARY KEY CHECK (slot = 0),
    value INTEGER NOT NULL
);
INSERT OR IGNORE INTO id_counter (slot, value) VALUES (0, 0);
CREATE TABLE IF NOT EXISTS products (
    id INTEGER PRIMARY KEY,
    record BLOB NOT NULL
);
"""


# ---------------------------
# Record codec
# ---------------------------
def encode_record(product: Product) -> bytes:
    data = product.model_dump_json().encode("utf-8")
    if len(data) > MAX_RECORD_SIZE:
        raise RecordTooLarge(
            f"Product id={product.id} encodes to {len(data)} bytes, limit is {MAX_RECORD_SIZE}"
        )
    return data


def decode_record(data: bytes) -> Product:
    try:
        return Product.model_validate_json(data)
    except ValidationError as e:
        raise StorageError(f"Stored product record is unreadable: {e}") from e


def _storable_key(product_id: int) -> bool:
    return 0 <= product_id <= MAX_PRODUCT_ID


# ---------------------------
# Identifier allocator
# ---------------------------
class IdAllocator:
    """Monotonic id source backed by the single-row ``id_counter`` table."""

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    def peek(self) -> int:
        row = self._conn.execute("SELECT value FROM id_counter WHERE slot = 0").fetchone()
        return row[0]

    def next_id(self) -> int:
        """Persist counter + 1 and return the value it held before."""
        try:
            with self._conn:
                value = self.peek()
                self._conn.execute("UPDATE id_counter SET value = ? WHERE slot = 0", (value + 1,))
        except (sqlite3.Error, OverflowError) as e:
            logger.error("Could not persist the id counter: %s", e)
            raise InvalidOperation("Failed to generate a unique ID.") from e
        return value


# ---------------------------
# Product store
# ---------------------------
class ProductStore:
    """Ordered map of product id -> Product, kept in the ``products`` table."""

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    def get(self, product_id: int) -> Optional[Product]:
        if not _storable_key(product_id):
            return None
        row = self._conn.execute(
            "SELECT record FROM products WHERE id = ?", (product_id,)
        ).fetchone()
        return decode_record(row[0]) if row else None

    def insert_or_replace(self, product_id: int, product: Product) -> None:
        if not _storable_key(product_id) or product.id != product_id:
            raise StorageError(f"Cannot store product id={product.id} under key {product_id}")
        data = encode_record(product)
        with self._conn:
            self._conn.execute(
                "INSERT OR REPLACE INTO products (id, record) VALUES (?, ?)",
                (product_id, data),
            )

    def remove(self, product_id: int) -> Optional[Product]:
        prior = self.get(product_id)
        if prior is None:
            return None
        with self._conn:
            self._conn.execute("DELETE FROM products WHERE id = ?", (product_id,))
        return prior

    def scan_all(self) -> List[Product]:
        rows = self._conn.execute("SELECT record FROM products ORDER BY id").fetchall()
        return [decode_record(row[0]) for row in rows]

    def scan_by_category(self, category: Category) -> List[Product]:
        return [p for p in self.scan_all() if p.category == category]

    def clear_all(self) -> int:
        with self._conn:
            cur = self._conn.execute("DELETE FROM products")
        return cur.rowcount

    def __len__(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM products").fetchone()[0]


# ---------------------------
# Ledger handle
# ---------------------------
class LedgerDB:
    """Owns the counter, the store and the clock used to stamp records.

    Operations in ``core`` take the ledger as their first argument and run
    inside ``exclusive()`` so one call finishes before the next starts.
    """

    def __init__(self, conn: sqlite3.Connection, clock: Optional[Callable[[], int]] = None):
        self._conn = conn
        self._lock = threading.RLock()
        self.ids = IdAllocator(conn)
        self.products = ProductStore(conn)
        self.clock = clock or time.time_ns

    @classmethod
    def open(cls, path: str, clock: Optional[Callable[[], int]] = None) -> "LedgerDB":
        if path != ":memory:":
            Path(path).resolve().parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(path, check_same_thread=False)
        conn.executescript(_SCHEMA)
        logger.debug("Opened ledger database at %s", path)
        return cls(conn, clock)

    @contextmanager
    def exclusive(self) -> Iterator["LedgerDB"]:
        with self._lock:
            yield self

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> "LedgerDB":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
