# shoplist/memory_repository.py

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.orm import Session, sessionmaker

from shoplist.entities import ItemMemory, ShoppingList


class MemoryRepository:
    """
    Per-list set of remembered item names.

    An entry means "this name was removed from this list and may be worth
    adding again". Entries are advisory: they never imply an Item exists.
    The *_in_session helpers let ItemRepository change memory in the same
    transaction as the item itself.
    """

    def __init__(self, session_factory: sessionmaker):
        self.SessionFactory = session_factory

    def suggestions(self, list_id: int) -> list[str]:
        session: Session = self.SessionFactory()
        try:
            rows = session.execute(
                select(ItemMemory.name)
                .where(ItemMemory.list_id == list_id)
                .distinct()
                .order_by(ItemMemory.name.asc())
            ).scalars().all()
            return list(rows)
        finally:
            session.close()

    def remember(self, list_id: int, name: str) -> None:
        name = (name or "").strip()
        if not name:
            return
        session: Session = self.SessionFactory()
        try:
            if session.get(ShoppingList, list_id) is None:
                return
            self.remember_in_session(session, list_id, name)
            session.commit()
        finally:
            session.close()

    def forget_name(self, list_id: int, name: str) -> None:
        name = (name or "").strip()
        if not name:
            return
        session: Session = self.SessionFactory()
        try:
            self.forget_in_session(session, list_id, name)
            session.commit()
        finally:
            session.close()

    # -----------------------
    # Same-transaction helpers
    # -----------------------

    @staticmethod
    def remember_in_session(session: Session, list_id: int, name: str) -> None:
        # UNIQUE(list_id, name) keeps one entry per name, even under concurrent deletes
        session.execute(
            insert(ItemMemory)
            .values(list_id=list_id, name=name)
            .on_conflict_do_nothing(index_elements=["list_id", "name"])
        )

    @staticmethod
    def forget_in_session(session: Session, list_id: int, name: str) -> None:
        session.execute(
            delete(ItemMemory).where(
                ItemMemory.list_id == list_id,
                ItemMemory.name == name,
            )
        )
