import pytest

from catalogbot.errors import DuplicateName, NotFound, PersistenceFailure
from catalogbot.models import Product
from catalogbot.store import CatalogStore


def _product(name, stock=1):
    return Product(name=name, description="", price=1.0, stock=stock,
                   channel_id=f"c-{name}", message_id=f"m-{name}")


def test_insert_persists_snapshot(store, snapshot):
    store.insert(_product("Widget"))
    assert snapshot.saves == 1
    assert [p.name for p in snapshot.saved] == ["Widget"]


def test_names_are_case_insensitive(store):
    store.insert(_product("Widget"))
    assert store.find("wIDGET").name == "Widget"
    with pytest.raises(DuplicateName):
        store.insert(_product("WIDGET"))
    assert len(store) == 1


def test_remove_missing_raises_not_found(store):
    with pytest.raises(NotFound):
        store.remove("nothing")


def test_list_keeps_insertion_order(store):
    for name in ["zeta", "alpha", "Mid"]:
        store.insert(_product(name))
    store.remove("alpha")
    store.insert(_product("alpha"))
    assert [p.name for p in store.list()] == ["zeta", "Mid", "alpha"]


@pytest.mark.parametrize("start,delta,expected", [(3, 2, 5), (3, -2, 1), (3, -3, 0), (3, -10, 0), (0, -1, 0)])
def test_adjust_clamps_at_zero(store, start, delta, expected):
    store.insert(_product("Widget", stock=start))
    assert store.adjust("widget", delta).stock == expected


def test_failed_persist_rolls_back_memory(store, snapshot):
    store.insert(_product("Widget", stock=3))
    snapshot.fail = True

    with pytest.raises(PersistenceFailure):
        store.insert(_product("Gadget"))
    with pytest.raises(PersistenceFailure):
        store.adjust("Widget", 5)
    with pytest.raises(PersistenceFailure):
        store.remove("Widget")

    assert [(p.name, p.stock) for p in store.list()] == [("Widget", 3)]


def test_open_loads_existing_snapshot(snapshot):
    snapshot.saved = [_product("Widget", stock=3)]
    store = CatalogStore.open(snapshot)
    assert store.get("widget").stock == 3


def test_find_by_slug(store):
    store.insert(_product("A+B"))
    assert store.find_by_slug("a-b").name == "A+B"
    assert store.find_by_slug("ab") is None
