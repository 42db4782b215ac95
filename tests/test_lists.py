import pytest
from sqlalchemy import func, select

from shoplist.entities import Item, ItemMemory
from shoplist.errors import InvariantViolation, ValidationError


def _count(backend, model, **filters):
    session = backend.SessionFactory()
    try:
        stmt = select(func.count()).select_from(model)
        for key, value in filters.items():
            stmt = stmt.where(getattr(model, key) == value)
        return session.execute(stmt).scalar_one()
    finally:
        session.close()


def test_bootstrap_creates_one_default_list(backend):
    lists = backend.lists.list_all()
    assert [l.name for l in lists] == ["Lista Principal"]


def test_ensure_default_is_idempotent(backend):
    assert backend.lists.ensure_default() is None
    assert backend.lists.ensure_default() is None
    assert len(backend.lists.list_all()) == 1


def test_list_all_is_in_creation_order(backend):
    backend.lists.create("Feira")
    backend.lists.create("Farmácia")
    assert [l.name for l in backend.lists.list_all()] == ["Lista Principal", "Feira", "Farmácia"]


def test_create_trims_and_rejects_blank_names(backend):
    created = backend.lists.create("  Mercado  ")
    assert created.id is not None
    assert created.name == "Mercado"

    with pytest.raises(ValidationError) as exc:
        backend.lists.create("   ")
    assert exc.value.code == "empty_name"


def test_rename(backend):
    l = backend.lists.create("Old")
    backend.lists.rename(l.id, "New")
    assert backend.lists.get(l.id).name == "New"


def test_rename_blank_or_unknown_is_noop(backend):
    l = backend.lists.create("Keep")
    backend.lists.rename(l.id, "  ")
    backend.lists.rename(9999, "Ghost")
    assert backend.lists.get(l.id).name == "Keep"
    assert backend.lists.get(9999) is None


def test_last_list_cannot_be_deleted(backend):
    only = backend.lists.first()
    with pytest.raises(InvariantViolation) as exc:
        backend.lists.delete(only.id)
    assert exc.value.code == "last_list_protected"
    assert backend.lists.get(only.id) is not None


def test_delete_unknown_list_is_noop(backend):
    backend.lists.delete(9999)
    assert len(backend.lists.list_all()) == 1


def test_delete_cascades_items_and_memory(backend):
    keep = backend.lists.first()
    doomed = backend.lists.create("Doomed")

    backend.items.add(doomed.id, "eggs")
    gone = backend.items.add(doomed.id, "milk")
    backend.items.delete(gone.id)
    survivor = backend.items.add(keep.id, "bread")
    assert _count(backend, ItemMemory, list_id=doomed.id) == 1

    backend.lists.delete(doomed.id)

    assert [l.id for l in backend.lists.list_all()] == [keep.id]
    assert _count(backend, Item, list_id=doomed.id) == 0
    assert _count(backend, ItemMemory, list_id=doomed.id) == 0
    assert [i.id for i in backend.items.items_for(keep.id)] == [survivor.id]


def test_after_deleting_one_of_two_the_other_is_protected(backend):
    first = backend.lists.first()
    second = backend.lists.create("Second")
    backend.lists.delete(first.id)
    with pytest.raises(InvariantViolation):
        backend.lists.delete(second.id)
    assert [l.id for l in backend.lists.list_all()] == [second.id]


def test_first_returns_lowest_id(backend):
    first = backend.lists.first()
    backend.lists.create("Later")
    assert backend.lists.first().id == first.id
