# tests/test_database.py
import sqlite3

import pytest

from bakery_ledger.database import (
    MAX_RECORD_SIZE, LedgerDB, decode_record, encode_record
)
from bakery_ledger.exceptions import InvalidOperation, RecordTooLarge, StorageError
from bakery_ledger.models import Category, Product


def make_product(product_id, name="Bagel", category=Category.BAKERY, quantity=1):
    return Product(id=product_id, name=name, category=category, quantity=quantity, created_at=1)


def test_counter_starts_at_zero_and_increments(ledger):
    assert ledger.ids.peek() == 0
    assert [ledger.ids.next_id() for _ in range(3)] == [0, 1, 2]
    assert ledger.ids.peek() == 3


def test_state_survives_reopen(db_path):
    with LedgerDB.open(db_path) as db:
        db.ids.next_id()
        db.ids.next_id()
        db.products.insert_or_replace(1, make_product(1, name="Rye"))

    with LedgerDB.open(db_path) as db:
        assert db.ids.next_id() == 2
        assert db.products.get(1).name == "Rye"
        assert len(db.products) == 1


def test_scan_is_ordered_by_id(ledger):
    for pid in (5, 1, 3):
        ledger.products.insert_or_replace(pid, make_product(pid))
    assert [p.id for p in ledger.products.scan_all()] == [1, 3, 5]


def test_insert_or_replace_overwrites(ledger):
    ledger.products.insert_or_replace(0, make_product(0, quantity=1))
    ledger.products.insert_or_replace(0, make_product(0, quantity=9))
    assert ledger.products.get(0).quantity == 9
    assert len(ledger.products) == 1


def test_remove_returns_prior_value(ledger):
    ledger.products.insert_or_replace(2, make_product(2))
    assert ledger.products.remove(2).id == 2
    assert ledger.products.remove(2) is None
    assert ledger.products.get(2) is None


def test_clear_all_leaves_counter(ledger):
    for _ in range(2):
        pid = ledger.ids.next_id()
        ledger.products.insert_or_replace(pid, make_product(pid))
    assert ledger.products.clear_all() == 2
    assert ledger.products.scan_all() == []
    assert ledger.ids.peek() == 2


def test_keys_outside_storable_range(ledger):
    assert ledger.products.get(-1) is None
    assert ledger.products.get(2**64 - 1) is None
    with pytest.raises(StorageError):
        ledger.products.insert_or_replace(1, make_product(2))


def test_record_size_is_enforced(ledger):
    big = make_product(0, name="x" * MAX_RECORD_SIZE)
    with pytest.raises(RecordTooLarge):
        encode_record(big)
    with pytest.raises(RecordTooLarge):
        ledger.products.insert_or_replace(0, big)
    assert ledger.products.get(0) is None


def test_record_codec_preserves_fields():
    p = Product(id=7, name="Éclair", category=Category.COOKIES, quantity=3, created_at=10, updated_at=20)
    assert decode_record(encode_record(p)) == p


def test_missing_category_decodes_as_default():
    p = decode_record(b'{"id": 1, "name": "Scone", "quantity": 2, "created_at": 5}')
    assert p.category is Category.BAKERY
    assert p.updated_at is None


def test_corrupt_record_raises_storage_error():
    with pytest.raises(StorageError):
        decode_record(b'{"id": 1, "name": "Scone", "quantity": -2, "created_at": 5}')


def test_stored_record_without_category(db_path):
    LedgerDB.open(db_path).close()
    conn = sqlite3.connect(db_path)
    with conn:
        conn.execute(
            "INSERT INTO products (id, record) VALUES (?, ?)",
            (4, b'{"id": 4, "name": "Scone", "quantity": 2, "created_at": 5}'),
        )
    conn.close()
    with LedgerDB.open(db_path) as db:
        assert db.products.scan_by_category(Category.BAKERY)[0].id == 4


def test_counter_failure_is_invalid_operation(db_path):
    db = LedgerDB.open(db_path)
    db.close()
    with pytest.raises(InvalidOperation, match="unique ID"):
        db.ids.next_id()
