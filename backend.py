import logging
from typing import Any, Optional

from shoplist.auth_gate import AuthGate
from shoplist.db_helpers import (
    APP_PIN,
    DEFAULT_LIST_NAME,
    SESSION_TTL_SECONDS,
    create_session_factory,
    get_db_engine,
    migrate_schema,
)
from shoplist.errors import InvariantViolation, ValidationError
from shoplist.item_repository import ItemRepository
from shoplist.list_repository import ListRepository
from shoplist.memory_repository import MemoryRepository
from shoplist.session_store import SessionStore

logger = logging.getLogger("shoplist_backend")


class Backend:
    """
    Composition root: one engine, one session factory, the three
    repositories and the auth gate. Route handlers call the use cases
    below and render whatever they return.
    """

    def __init__(
        self,
        db_url: Optional[str] = None,
        pin: Optional[str] = None,
        session_ttl_seconds: int = SESSION_TTL_SECONDS,
        default_list_name: str = DEFAULT_LIST_NAME,
        sessions: Optional[SessionStore] = None,
    ):
        self.engine = get_db_engine(db_url)
        migrate_schema(self.engine)
        self.SessionFactory = create_session_factory(self.engine)

        self.lists = ListRepository(self.SessionFactory, default_name=default_list_name)
        self.memory = MemoryRepository(self.SessionFactory)
        self.items = ItemRepository(self.SessionFactory, self.memory)

        self.sessions = sessions if sessions is not None else SessionStore(ttl_seconds=session_ttl_seconds)
        self.auth = AuthGate(self.sessions, APP_PIN if pin is None else pin)

        self.lists.ensure_default()

    def close(self) -> None:
        self.engine.dispose()

    # -----------------------
    # View models
    # -----------------------

    def page_data(self, list_id: int = 0, show_manager: bool = False) -> dict[str, Any]:
        lists = [l.to_dict() for l in self.lists.list_all()]
        current_list: dict[str, Any] = {"id": 0, "name": ""}
        items: list[dict[str, Any]] = []
        suggestions: list[str] = []

        if list_id > 0:
            found = self.lists.get(list_id)
            if found is not None:
                current_list = found.to_dict()
                items = [i.to_dict() for i in self.items.items_for(list_id)]
                suggestions = self.memory.suggestions(list_id)

        return {
            "lists": lists,
            "current_list": current_list,
            "items": items,
            "suggestions": suggestions,
            "show_manager": show_manager,
        }

    def landing_list_id(self) -> Optional[int]:
        first = self.lists.first()
        return first.id if first is not None else None

    # -----------------------
    # Lists
    # -----------------------

    def create_list(self, name: str) -> bool:
        try:
            created = self.lists.create(name)
        except ValidationError as e:
            logger.debug(f"[LISTS] Ignored create: {e}")
            return False
        logger.info(f"[LISTS] Created list id={created.id}")
        return True

    def rename_list(self, list_id: int, name: str) -> None:
        self.lists.rename(list_id, name)

    def delete_list(self, list_id: int) -> bool:
        try:
            self.lists.delete(list_id)
        except InvariantViolation as e:
            logger.warning(f"[LISTS] Refused delete of list id={list_id}: {e}")
            return False
        return True

    # -----------------------
    # Items
    # -----------------------

    def add_item(self, list_id: int, name: str) -> dict[str, Any]:
        self.items.add(list_id, name)
        return self.page_data(list_id)

    def rename_item(self, item_id: int, name: str) -> dict[str, Any]:
        item = self.items.get(item_id)
        self.items.rename(item_id, name)
        return self.page_data(item.list_id if item and item.list_id else 0)

    def toggle_item(self, item_id: int) -> dict[str, Any]:
        item = self.items.toggle_completed(item_id)
        return self.page_data(item.list_id if item and item.list_id else 0)

    def delete_item(self, item_id: int) -> dict[str, Any]:
        item = self.items.delete(item_id)
        return self.page_data(item.list_id if item and item.list_id else 0)

    def forget_item(self, item_id: int) -> dict[str, Any]:
        item = self.items.get(item_id)
        self.items.forget(item_id)
        return self.page_data(item.list_id if item and item.list_id else 0)

    def forget_suggestion(self, list_id: int, name: str) -> dict[str, Any]:
        self.memory.forget_name(list_id, name)
        return self.page_data(list_id)
