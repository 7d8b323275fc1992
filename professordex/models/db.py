"""
SQLAlchemy ORM models for persistent storage.

Each table holds one kind of per-user record (collections, their card
entries, master-set entries, the owned-card index, ...). Ownership maps and
catalog snapshots are JSON columns; everything the service filters or joins
on is a real column.

JSON columns are never mutated in place. Writers assign a fresh dict/list so
the change is tracked.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _new_id() -> str:
    return uuid4().hex


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class UserCollectionDB(Base):
    """
    A user-named grouping of cards ("Binder 1", "Trade pile").

    A user can have any number of collections.
    """

    __tablename__ = "user_collections"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    name: Mapped[str] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    cards: Mapped[list["CollectionCardDB"]] = relationship(
        back_populates="collection", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<UserCollectionDB(id={self.id}, user_id={self.user_id}, name={self.name})>"


class CollectionCardDB(Base):
    """One card's ownership state within one collection."""

    __tablename__ = "collection_cards"
    __table_args__ = (UniqueConstraint("collection_id", "card_id", name="uq_collection_card"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("user_collections.id", ondelete="CASCADE"), index=True
    )
    card_id: Mapped[str] = mapped_column(String(64), index=True)
    card: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    owned: Mapped[dict[str, bool]] = mapped_column(JSON, default=dict)
    quantity: Mapped[int] = mapped_column(Integer, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    collection: Mapped["UserCollectionDB"] = relationship(back_populates="cards")

    def __repr__(self) -> str:
        return f"<CollectionCardDB(collection={self.collection_id}, card={self.card_id})>"


class MasterSetCardDB(Base):
    """One card's ownership state within a user's master set of a card set."""

    __tablename__ = "master_set_cards"
    __table_args__ = (
        UniqueConstraint("user_id", "set_id", "card_id", name="uq_master_set_card"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    set_id: Mapped[str] = mapped_column(String(64), index=True)
    card_id: Mapped[str] = mapped_column(String(64))
    card: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    owned: Mapped[dict[str, bool]] = mapped_column(JSON, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        return f"<MasterSetCardDB(set={self.set_id}, card={self.card_id})>"


class OwnedCardDB(Base):
    """
    Cross-reference of a card's ownership across every scope it appears in.

    `owned` is true iff any value in `variants` is true. `collections` lists
    the collection ids and set ids that have written to this row.
    """

    __tablename__ = "owned_cards"
    __table_args__ = (UniqueConstraint("user_id", "card_id", name="uq_owned_card"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    card_id: Mapped[str] = mapped_column(String(64))
    name: Mapped[str] = mapped_column(String(255), default="")
    images: Mapped[dict[str, str]] = mapped_column(JSON, default=dict)
    supertype: Mapped[str] = mapped_column(String(32), default="")
    rarity: Mapped[str | None] = mapped_column(String(64), nullable=True)
    owned: Mapped[bool] = mapped_column(Boolean, default=False)
    variants: Mapped[dict[str, bool]] = mapped_column(JSON, default=dict)
    collections: Mapped[list[str]] = mapped_column(JSON, default=list)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        return f"<OwnedCardDB(card={self.card_id}, owned={self.owned})>"


class MasterSetSummaryDB(Base):
    """Derived completion counts for one master set."""

    __tablename__ = "master_set_summaries"
    __table_args__ = (UniqueConstraint("user_id", "set_id", name="uq_master_set_summary"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    set_id: Mapped[str] = mapped_column(String(64))
    owned: Mapped[int] = mapped_column(Integer, default=0)
    total: Mapped[int] = mapped_column(Integer, default=0)
    completed: Mapped[bool] = mapped_column(Boolean, default=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        return f"<MasterSetSummaryDB(set={self.set_id}, {self.owned}/{self.total})>"


class DeckDB(Base):
    """A user-built deck. Stacks are stored in order as catalog snapshots."""

    __tablename__ = "decks"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    name: Mapped[str] = mapped_column(String(255))
    cards: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        return f"<DeckDB(id={self.id}, name={self.name})>"


class VariantMembershipDB(Base):
    """
    Card ids known to carry a pattern variant.

    Pattern printings cannot be told apart from catalog fields, so the lists
    are maintained here and shared by all users.
    """

    __tablename__ = "variant_memberships"

    variant: Mapped[str] = mapped_column(String(64), primary_key=True)
    card_ids: Mapped[list[str]] = mapped_column(JSON, default=list)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        return f"<VariantMembershipDB(variant={self.variant}, cards={len(self.card_ids)})>"
