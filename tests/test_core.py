# tests/test_core.py
import pytest

from bakery_ledger import core
from bakery_ledger.exceptions import InvalidOperation, NotFound
from bakery_ledger.models import U32_MAX, Category, ProductPayload, StockPayload


def payload(name="Muffin", quantity=10, category=Category.BAKERY):
    return ProductPayload(name=name, quantity=quantity, category=category)


def stock(amount):
    return StockPayload(amount=amount)


def test_ids_are_strictly_increasing(ledger):
    ids = [core.add_product(ledger, payload(name=f"item {i}")).id for i in range(5)]
    assert ids == [0, 1, 2, 3, 4]


def test_new_product_has_no_updated_at(ledger):
    p = core.add_product(ledger, payload())
    assert p.updated_at is None
    assert p.created_at > 0
    assert core.get_product(ledger, p.id) == p


@pytest.mark.parametrize("name", ["", "   ", "\t\n"])
def test_add_product_rejects_blank_name(ledger, name):
    with pytest.raises(InvalidOperation, match="name cannot be empty"):
        core.add_product(ledger, payload(name=name))
    assert core.list_all_products(ledger) == []


def test_add_product_rejects_zero_quantity(ledger):
    with pytest.raises(InvalidOperation, match="greater than zero"):
        core.add_product(ledger, payload(quantity=0))


def test_add_product_rejects_overlong_name(ledger):
    with pytest.raises(InvalidOperation):
        core.add_product(ledger, payload(name="x" * 129))


def test_rejected_add_does_not_consume_an_id(ledger):
    with pytest.raises(InvalidOperation):
        core.add_product(ledger, payload(quantity=0))
    assert core.add_product(ledger, payload()).id == 0


def test_update_missing_product(ledger):
    with pytest.raises(NotFound, match="id=42"):
        core.update_product(ledger, 42, payload())


def test_update_validates_before_lookup(ledger):
    with pytest.raises(InvalidOperation):
        core.update_product(ledger, 42, payload(name=" "))


def test_update_replaces_fields_and_keeps_identity(ledger):
    original = core.add_product(ledger, payload())
    updated = core.update_product(ledger, original.id, payload(name="Cheesecake", quantity=3, category=Category.CAKE))
    assert updated.id == original.id
    assert updated.created_at == original.created_at
    assert updated.updated_at > original.created_at
    assert (updated.name, updated.quantity, updated.category) == ("Cheesecake", 3, Category.CAKE)

    again = core.update_product(ledger, original.id, payload(name="Cheesecake", quantity=4, category=Category.CAKE))
    assert again.updated_at > updated.updated_at
    assert core.get_product(ledger, original.id) == again


def test_updated_at_never_moves_backwards(ledger):
    readings = iter([5_000, 4_000, 3_000])
    ledger.clock = lambda: next(readings)
    p = core.add_product(ledger, payload())
    first = core.add_quantity(ledger, p.id, stock(1))
    second = core.offload_quantity(ledger, p.id, stock(1))
    assert p.created_at <= first.updated_at <= second.updated_at


def test_get_stock(ledger):
    p = core.add_product(ledger, payload(quantity=7))
    assert core.get_stock(ledger, p.id) == 7
    with pytest.raises(NotFound):
        core.get_stock(ledger, p.id + 1)


def test_add_quantity_from_zero(ledger):
    p = core.add_product(ledger, payload(quantity=1))
    core.offload_quantity(ledger, p.id, stock(1))
    assert core.add_quantity(ledger, p.id, stock(5)).quantity == 5


def test_add_quantity_rejects_zero_amount(ledger):
    p = core.add_product(ledger, payload())
    with pytest.raises(InvalidOperation, match="Stock amount"):
        core.add_quantity(ledger, p.id, stock(0))


def test_add_quantity_missing_product(ledger):
    with pytest.raises(NotFound, match="Couldn't add quantity"):
        core.add_quantity(ledger, 3, stock(1))


def test_add_quantity_rejects_u32_overflow(ledger):
    p = core.add_product(ledger, payload(quantity=U32_MAX))
    with pytest.raises(InvalidOperation):
        core.add_quantity(ledger, p.id, stock(1))
    assert core.get_stock(ledger, p.id) == U32_MAX


def test_offload_more_than_available_leaves_quantity(ledger):
    p = core.add_product(ledger, payload(quantity=4))
    with pytest.raises(InvalidOperation, match="Available: 4, Trying to offload: 5"):
        core.offload_quantity(ledger, p.id, stock(5))
    stored = core.get_product(ledger, p.id)
    assert stored.quantity == 4
    assert stored.updated_at is None


@pytest.mark.parametrize("amount", [1, 100])
def test_offload_from_empty_stock(ledger, amount):
    p = core.add_product(ledger, payload(quantity=2))
    core.offload_quantity(ledger, p.id, stock(2))
    with pytest.raises(InvalidOperation, match="quantity is 0"):
        core.offload_quantity(ledger, p.id, stock(amount))


def test_offload_missing_product(ledger):
    with pytest.raises(NotFound, match="Couldn't offload"):
        core.offload_quantity(ledger, 9, stock(1))


def test_remove_then_get(ledger):
    p = core.add_product(ledger, payload())
    assert core.remove_product(ledger, p.id) == p
    with pytest.raises(NotFound):
        core.get_product(ledger, p.id)
    with pytest.raises(NotFound, match="Couldn't delete"):
        core.remove_product(ledger, p.id)


def test_clear_keeps_counter(ledger):
    for i in range(3):
        core.add_product(ledger, payload(name=f"p{i}"))
    core.clear_all_products(ledger)
    assert core.list_all_products(ledger) == []
    assert core.add_product(ledger, payload()).id == 3


def test_removed_ids_are_not_reused(ledger):
    first = core.add_product(ledger, payload())
    core.remove_product(ledger, first.id)
    assert core.add_product(ledger, payload()).id == first.id + 1


def test_search_by_category_is_ordered_subset(ledger):
    cats = [Category.CAKE, Category.BAKERY, Category.CAKE, Category.COOKIES, Category.CAKE]
    for i, cat in enumerate(cats):
        core.add_product(ledger, payload(name=f"p{i}", category=cat))
    everything = core.list_all_products(ledger)
    cakes = core.search_by_category(ledger, Category.CAKE)
    assert cakes == [p for p in everything if p.category == Category.CAKE]
    assert [p.id for p in cakes] == [0, 2, 4]
    assert core.search_by_category(ledger, Category.COOKIES)[0].name == "p3"


def test_muffin_scenario(ledger):
    muffin = core.add_product(ledger, payload(name="Muffin", quantity=10, category=Category.BAKERY))
    assert muffin.id == 0
    assert core.add_quantity(ledger, 0, stock(5)).quantity == 15
    with pytest.raises(InvalidOperation):
        core.offload_quantity(ledger, 0, stock(20))
    assert core.offload_quantity(ledger, 0, stock(15)).quantity == 0
    with pytest.raises(InvalidOperation, match="quantity is 0"):
        core.offload_quantity(ledger, 0, stock(1))


def test_add_product_rejects_unencodable_name(ledger):
    with pytest.raises(InvalidOperation, match="valid Unicode"):
        core.add_product(ledger, payload(name="ab\ud800"))
    assert ledger.ids.peek() == 0
    assert core.list_all_products(ledger) == []


def test_rejected_update_leaves_record_unchanged(ledger):
    p = core.add_product(ledger, payload(name="Brownie", quantity=6, category=Category.COOKIES))
    with pytest.raises(InvalidOperation, match="greater than zero"):
        core.update_product(ledger, p.id, payload(name="Fudge", quantity=0, category=Category.CAKE))
    with pytest.raises(InvalidOperation):
        core.update_product(ledger, p.id, payload(name="ab\ud800"))
    assert core.get_product(ledger, p.id) == p
