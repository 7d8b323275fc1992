"""
Collection API endpoints.

Provides CRUD for a user's named collections and the ownership operations
on their card entries. Mutations publish the collection's new card list on
the change feed once committed.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, WebSocket, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from professordex.api.deps import (
    FeedDep,
    MembershipDep,
    SessionDep,
    SessionFactoryDep,
    UserDep,
    get_user_session,
    parse_card,
)
from professordex.api.schemas import (
    BatchResponse,
    CardEntryResponse,
    DeleteResponse,
    ToggleRequest,
    ToggleResponse,
)
from professordex.api.streaming import relay_snapshots
from professordex.db import (
    collection_card_counts,
    collection_card_to_entry,
    create_collection,
    delete_collection,
    get_collection,
    get_variant_membership,
    list_collection_cards,
    list_collections,
    rename_collection,
)
from professordex.models.db import UserCollectionDB
from professordex.models.failure import NotFoundError
from professordex.models.ownership import ScopeRef, VariantMembership
from professordex.models.session import UserSession
from professordex.services.name_validation import validate_name
from professordex.services.ownership import OwnershipReconciler
from professordex.services.stats import collection_variant_totals, owned_variant_cards
from professordex.services.subscriptions import ChangeFeed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users/{user_id}/collections", tags=["collections"])


class CollectionRequest(BaseModel):
    """Request model for creating or renaming a collection."""

    name: str = Field(..., description="Collection name", examples=["Binder 1"])


class CollectionResponse(BaseModel):
    """Response model for a collection."""

    id: str
    name: str
    created_at: datetime | None = None
    card_count: int = Field(default=0, description="Card entries in the collection")
    held_count: int = Field(default=0, description="Entries with at least one copy on hand")


class OwnedVariantCard(BaseModel):
    card_id: str
    name: str
    variant: str
    images: dict[str, str] = Field(default_factory=dict)


class CollectionCardsResponse(BaseModel):
    """Response model for a collection's card entries."""

    collection_id: str
    name: str
    cards: list[CardEntryResponse] = Field(default_factory=list)
    variant_totals: dict[str, int] = Field(
        default_factory=dict,
        description="Entries owning each variant",
    )
    owned_variants: list[OwnedVariantCard] = Field(default_factory=list)


class QuantityRequest(BaseModel):
    delta: int = Field(..., description="Copies to add (negative to remove)", examples=[1, -1])


class QuantityResponse(BaseModel):
    card_id: str
    quantity: int


class MarkAllRequest(BaseModel):
    owned: bool = Field(default=True, description="Mark every variant owned or not owned")


async def _require_collection(
    session: AsyncSession, user: UserSession, collection_id: str
) -> UserCollectionDB:
    collection = await get_collection(session, user.user_id, collection_id)
    if collection is None:
        raise NotFoundError("Collection", collection_id)
    return collection


async def _cards_response(
    session: AsyncSession,
    user: UserSession,
    collection_id: str,
    membership: VariantMembership,
) -> CollectionCardsResponse:
    collection = await _require_collection(session, user, collection_id)
    rows = await list_collection_cards(session, collection_id)
    entries = [collection_card_to_entry(row) for row in rows]

    return CollectionCardsResponse(
        collection_id=collection.id,
        name=collection.name,
        cards=[CardEntryResponse.from_entry(entry, membership) for entry in entries],
        variant_totals=collection_variant_totals(entries),
        owned_variants=[
            OwnedVariantCard(card_id=card.id, name=card.name, variant=variant, images=card.images)
            for card, variant in owned_variant_cards(entries, membership)
        ],
    )


def _feed_scope(user: UserSession, collection_id: str) -> str:
    return user.scope_path("collections", collection_id, "cards")


async def _commit_and_publish(
    session: AsyncSession,
    user: UserSession,
    collection_id: str,
    membership: VariantMembership,
    feed: ChangeFeed,
) -> None:
    await session.commit()
    snapshot = await _cards_response(session, user, collection_id, membership)
    feed.publish(_feed_scope(user, collection_id), snapshot.model_dump(mode="json"))


@router.get("", response_model=list[CollectionResponse])
async def get_user_collections(user: UserDep, session: SessionDep) -> list[CollectionResponse]:
    """List a user's collections with entry counts."""
    collections = await list_collections(session, user.user_id)
    counts = await collection_card_counts(session, (c.id for c in collections))

    return [
        CollectionResponse(
            id=c.id,
            name=c.name,
            created_at=c.created_at,
            card_count=counts[c.id][0],
            held_count=counts[c.id][1],
        )
        for c in collections
    ]


@router.post("", response_model=CollectionResponse, status_code=status.HTTP_201_CREATED)
async def create_user_collection(
    request: CollectionRequest, user: UserDep, session: SessionDep
) -> CollectionResponse:
    """Create a new, empty collection."""
    name = validate_name(request.name, "Collection")
    collection = await create_collection(session, user.user_id, name)
    logger.info("User %s created collection %s", user.user_id, collection.id)
    return CollectionResponse(
        id=collection.id, name=collection.name, created_at=collection.created_at
    )


@router.patch("/{collection_id}", response_model=CollectionResponse)
async def rename_user_collection(
    collection_id: str, request: CollectionRequest, user: UserDep, session: SessionDep
) -> CollectionResponse:
    """Rename a collection."""
    name = validate_name(request.name, "Collection")
    collection = await rename_collection(session, user.user_id, collection_id, name)
    if collection is None:
        raise NotFoundError("Collection", collection_id)

    counts = await collection_card_counts(session, [collection.id])
    return CollectionResponse(
        id=collection.id,
        name=collection.name,
        created_at=collection.created_at,
        card_count=counts[collection.id][0],
        held_count=counts[collection.id][1],
    )


@router.delete("/{collection_id}", response_model=DeleteResponse)
async def delete_user_collection(
    collection_id: str, user: UserDep, session: SessionDep
) -> DeleteResponse:
    """
    Delete a collection and its card entries.

    The owned-card index keeps its rows; ownership recorded through this
    collection still counts toward the dashboard.
    """
    deleted = await delete_collection(session, user.user_id, collection_id)
    if not deleted:
        raise NotFoundError("Collection", collection_id)
    return DeleteResponse(deleted=True, message="Collection deleted.")


@router.get("/{collection_id}/cards", response_model=CollectionCardsResponse)
async def get_collection_cards(
    collection_id: str, user: UserDep, session: SessionDep, membership: MembershipDep
) -> CollectionCardsResponse:
    """Get every card entry of a collection with variant totals."""
    return await _cards_response(session, user, collection_id, membership)


@router.post("/{collection_id}/cards/{card_id}/toggle", response_model=ToggleResponse)
async def toggle_collection_variant(
    collection_id: str,
    card_id: str,
    request: ToggleRequest,
    user: UserDep,
    session: SessionDep,
    membership: MembershipDep,
    feed: FeedDep,
) -> ToggleResponse:
    """
    Flip one variant of a card in a collection.

    Creates the card entry on first toggle. The owned-card index is updated
    in the same transaction.
    """
    card = parse_card(request.card, card_id)
    reconciler = OwnershipReconciler(session, user, membership)
    owned = await reconciler.toggle_variant(
        ScopeRef.collection(collection_id), card, request.variant
    )

    await _commit_and_publish(session, user, collection_id, membership, feed)
    return ToggleResponse(card_id=card_id, variant=request.variant, owned=owned)


@router.post("/{collection_id}/cards/{card_id}/quantity", response_model=QuantityResponse)
async def update_card_quantity(
    collection_id: str,
    card_id: str,
    request: QuantityRequest,
    user: UserDep,
    session: SessionDep,
    membership: MembershipDep,
    feed: FeedDep,
) -> QuantityResponse:
    """Adjust copies on hand of an existing entry. Never goes below zero."""
    reconciler = OwnershipReconciler(session, user, membership)
    quantity = await reconciler.update_quantity(collection_id, card_id, request.delta)

    await _commit_and_publish(session, user, collection_id, membership, feed)
    return QuantityResponse(card_id=card_id, quantity=quantity)


@router.post("/{collection_id}/mark-all", response_model=BatchResponse)
async def mark_all_variants(
    collection_id: str,
    request: MarkAllRequest,
    user: UserDep,
    session: SessionDep,
    membership: MembershipDep,
    feed: FeedDep,
) -> BatchResponse:
    """Mark every variant of every entry owned (or not owned)."""
    reconciler = OwnershipReconciler(session, user, membership)
    updated = await reconciler.mark_all(collection_id, request.owned)

    await _commit_and_publish(session, user, collection_id, membership, feed)
    state = "owned" if request.owned else "not owned"
    return BatchResponse(updated=updated, message=f"Marked {updated} cards as {state}.")


@router.post("/{collection_id}/recalculate", response_model=BatchResponse)
async def recalculate_collection(
    collection_id: str,
    user: UserDep,
    session: SessionDep,
    membership: MembershipDep,
    feed: FeedDep,
) -> BatchResponse:
    """Rebuild every entry's owned map from the current variant rules."""
    reconciler = OwnershipReconciler(session, user, membership)
    changed = await reconciler.recalculate_collection(collection_id)

    await _commit_and_publish(session, user, collection_id, membership, feed)
    return BatchResponse(updated=changed, message=f"Recalculated stats, {changed} cards changed.")


@router.websocket("/{collection_id}/cards/feed")
async def collection_cards_feed(
    websocket: WebSocket,
    user_id: str,
    collection_id: str,
    feed: FeedDep,
    session_factory: SessionFactoryDep,
) -> None:
    """
    Stream a collection's card list.

    Sends the current list on connect, then the full list again after every
    committed change. An unknown collection gets a not-found envelope and a
    policy-violation close.
    """
    user = get_user_session(user_id)
    await websocket.accept()

    async with feed.subscribe(_feed_scope(user, collection_id)) as subscription:
        async with session_factory() as session:
            membership = await get_variant_membership(session)
            try:
                initial = await _cards_response(session, user, collection_id, membership)
            except NotFoundError as e:
                await websocket.send_json(e.to_response().model_dump(mode="json"))
                await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
                return

        await relay_snapshots(websocket, subscription, initial.model_dump(mode="json"))
