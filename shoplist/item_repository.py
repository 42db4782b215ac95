# shoplist/item_repository.py

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from shoplist.entities import Item, ShoppingList
from shoplist.memory_repository import MemoryRepository


class ItemRepository:
    """
    Items scoped to a list.

    Display order is open items first, then completed ones; newest first
    inside each group. Unknown ids are ignored rather than reported.
    """

    def __init__(self, session_factory: sessionmaker, memory: MemoryRepository):
        self.SessionFactory = session_factory
        self.memory = memory

    def items_for(self, list_id: int) -> list[Item]:
        session: Session = self.SessionFactory()
        try:
            return list(
                session.execute(
                    select(Item)
                    .where(Item.list_id == list_id)
                    .order_by(Item.completed.asc(), Item.id.desc())
                ).scalars().all()
            )
        finally:
            session.close()

    def get(self, item_id: int) -> Optional[Item]:
        session: Session = self.SessionFactory()
        try:
            return session.get(Item, item_id)
        finally:
            session.close()

    def add(self, list_id: int, name: str) -> Optional[Item]:
        name = (name or "").strip()
        if not name:
            return None
        session: Session = self.SessionFactory()
        try:
            if session.get(ShoppingList, list_id) is None:
                return None
            item = Item(list_id=list_id, name=name, completed=False)
            session.add(item)
            # adding a name back clears its suggestion
            self.memory.forget_in_session(session, list_id, name)
            session.commit()
            return item
        finally:
            session.close()

    def rename(self, item_id: int, new_name: str) -> Optional[Item]:
        new_name = (new_name or "").strip()
        if not new_name:
            return None
        session: Session = self.SessionFactory()
        try:
            item = session.get(Item, item_id)
            if item is None:
                return None
            item.name = new_name
            session.commit()
            return item
        finally:
            session.close()

    def toggle_completed(self, item_id: int) -> Optional[Item]:
        session: Session = self.SessionFactory()
        try:
            item = session.get(Item, item_id)
            if item is None:
                return None
            item.completed = not item.completed
            session.commit()
            return item
        finally:
            session.close()

    def delete(self, item_id: int) -> Optional[Item]:
        """
        Remove the item and remember its name for the owning list,
        both in one transaction. Returns the deleted item, or None.
        """
        session: Session = self.SessionFactory()
        try:
            item = session.get(Item, item_id)
            if item is None:
                return None
            session.delete(item)
            if item.list_id is not None:
                self.memory.remember_in_session(session, item.list_id, item.name)
            session.commit()
            return item
        finally:
            session.close()

    def forget(self, item_id: int) -> None:
        """Dismiss the suggestion matching this item's name. The item stays."""
        session: Session = self.SessionFactory()
        try:
            item = session.get(Item, item_id)
            if item is None or item.list_id is None:
                return
            self.memory.forget_in_session(session, item.list_id, item.name)
            session.commit()
        finally:
            session.close()
