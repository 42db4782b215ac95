# shoplist/list_repository.py

import logging
from typing import Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.orm import Session, aliased, sessionmaker

from shoplist.entities import Item, ItemMemory, ShoppingList
from shoplist.errors import InvariantViolation, ValidationError

logger = logging.getLogger("shoplist_backend")


class ListRepository:
    """
    Named lists. There is always at least one: the last list cannot be
    deleted, and ensure_default() creates one on an empty database.
    """

    def __init__(self, session_factory: sessionmaker, default_name: str = "Lista Principal"):
        self.SessionFactory = session_factory
        self.default_name = default_name

    def list_all(self) -> list[ShoppingList]:
        session: Session = self.SessionFactory()
        try:
            return list(
                session.execute(select(ShoppingList).order_by(ShoppingList.id.asc())).scalars().all()
            )
        finally:
            session.close()

    def first(self) -> Optional[ShoppingList]:
        session: Session = self.SessionFactory()
        try:
            return session.execute(
                select(ShoppingList).order_by(ShoppingList.id.asc()).limit(1)
            ).scalars().first()
        finally:
            session.close()

    def get(self, list_id: int) -> Optional[ShoppingList]:
        session: Session = self.SessionFactory()
        try:
            return session.get(ShoppingList, list_id)
        finally:
            session.close()

    def create(self, name: str) -> ShoppingList:
        name = (name or "").strip()
        if not name:
            raise ValidationError("List name cannot be empty")
        session: Session = self.SessionFactory()
        try:
            shopping_list = ShoppingList(name=name)
            session.add(shopping_list)
            session.commit()
            return shopping_list
        finally:
            session.close()

    def rename(self, list_id: int, new_name: str) -> None:
        new_name = (new_name or "").strip()
        if not new_name:
            return
        session: Session = self.SessionFactory()
        try:
            session.execute(
                update(ShoppingList).where(ShoppingList.id == list_id).values(name=new_name)
                .execution_options(synchronize_session=False)
            )
            session.commit()
        finally:
            session.close()

    def delete(self, list_id: int) -> None:
        """
        Delete a list together with its items and memory, all or nothing.
        Raises InvariantViolation when list_id is the only list left.
        """
        session: Session = self.SessionFactory()
        try:
            # count check and delete in one statement: two concurrent deletes
            # cannot both see "two lists left"
            others = aliased(ShoppingList)
            remaining = select(func.count()).select_from(others).scalar_subquery()
            result = session.execute(
                delete(ShoppingList)
                .where(ShoppingList.id == list_id, remaining > 1)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                exists = session.get(ShoppingList, list_id) is not None
                session.rollback()
                if exists:
                    raise InvariantViolation(
                        "Cannot delete the last remaining list",
                        details={"list_id": list_id},
                    )
                return

            session.execute(
                delete(Item).where(Item.list_id == list_id).execution_options(synchronize_session=False)
            )
            session.execute(
                delete(ItemMemory).where(ItemMemory.list_id == list_id).execution_options(synchronize_session=False)
            )
            session.commit()
        finally:
            session.close()

    def ensure_default(self) -> Optional[ShoppingList]:
        """
        Create the default list when none exist and adopt orphaned items.
        Returns the new list, or None when lists were already there.
        """
        session: Session = self.SessionFactory()
        try:
            count = session.execute(select(func.count()).select_from(ShoppingList)).scalar_one()
            if count > 0:
                return None

            default = ShoppingList(name=self.default_name)
            session.add(default)
            session.flush()

            valid_ids = select(ShoppingList.id)
            adopted = session.execute(
                update(Item)
                .where(
                    or_(
                        Item.list_id.is_(None),
                        Item.list_id == 0,
                        Item.list_id.not_in(valid_ids),
                    )
                )
                .values(list_id=default.id)
                .execution_options(synchronize_session=False)
            ).rowcount
            session.commit()
            logger.info(f"[BOOTSTRAP] Created default list '{default.name}' (id={default.id}), adopted {adopted} item(s)")
            return default
        finally:
            session.close()
