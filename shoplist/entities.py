# shoplist/entities.py
from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

Base = declarative_base()


class ShoppingList(Base):
    __tablename__ = "lists"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}


class Item(Base):
    __tablename__ = "items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # nullable: rows from older releases may predate lists; bootstrap adopts them
    list_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("lists.id", ondelete="CASCADE"),
        nullable=True,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    completed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("0"),
    )

    __table_args__ = (
        Index("ix_items_list_id", "list_id"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "list_id": self.list_id,
            "name": self.name,
            "completed": bool(self.completed),
        }


class ItemMemory(Base):
    """A name recently removed from a list, offered back as a quick-add suggestion."""
    __tablename__ = "item_memory"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    list_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("lists.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (
        UniqueConstraint("list_id", "name", name="uq_item_memory_list_name"),
    )
