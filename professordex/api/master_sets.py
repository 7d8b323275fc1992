"""
Master-set API endpoints.

A master set tracks every variant of every card in one catalog set. The set
page reads the set's cards from the catalog and overlays the user's entries.
"""

import logging
from typing import Literal

from fastapi import APIRouter, WebSocket
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from professordex.api.deps import (
    CatalogDep,
    FeedDep,
    MembershipDep,
    SessionDep,
    SessionFactoryDep,
    UserDep,
    get_user_session,
    parse_card,
)
from professordex.api.schemas import (
    CardEntryResponse,
    SummaryResponse,
    ToggleRequest,
    ToggleResponse,
)
from professordex.api.streaming import relay_snapshots
from professordex.db import (
    get_master_set_summary,
    get_variant_membership,
    list_master_set_cards,
    list_master_set_summaries,
    master_set_card_to_entry,
    summary_to_model,
)
from professordex.models.ownership import OwnershipEntry, ScopeRef, VariantMembership
from professordex.models.session import UserSession
from professordex.services.ownership import OwnershipReconciler
from professordex.services.set_catalog import sort_set_cards
from professordex.services.stats import set_variant_stats
from professordex.services.subscriptions import ChangeFeed
from professordex.services.variants import classify, ordered

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users/{user_id}/master-sets", tags=["master-sets"])


class SetInfo(BaseModel):
    id: str
    name: str
    series: str
    total: int | None = None
    printed_total: int | None = None
    release_date: str | None = None
    images: dict[str, str] = Field(default_factory=dict)


class VariantStatResponse(BaseModel):
    variant: str
    owned: int
    total: int


class MasterSetResponse(BaseModel):
    """Response model for one set page."""

    set: SetInfo
    cards: list[CardEntryResponse] = Field(
        default_factory=list,
        description="Every card of the set, with the user's ownership overlaid",
    )
    variant_stats: list[VariantStatResponse] = Field(default_factory=list)
    summary: SummaryResponse | None = None


class MasterSetEntriesResponse(BaseModel):
    """A master set's stored entries, as sent on the change feed."""

    set_id: str
    cards: list[CardEntryResponse] = Field(default_factory=list)


async def _entries(session: AsyncSession, user: UserSession, set_id: str) -> list[OwnershipEntry]:
    rows = await list_master_set_cards(session, user.user_id, set_id)
    return [master_set_card_to_entry(row) for row in rows]


async def _entries_response(
    session: AsyncSession, user: UserSession, set_id: str, membership: VariantMembership
) -> MasterSetEntriesResponse:
    entries = await _entries(session, user, set_id)
    return MasterSetEntriesResponse(
        set_id=set_id,
        cards=[CardEntryResponse.from_entry(entry, membership) for entry in entries],
    )


def _feed_scope(user: UserSession, set_id: str) -> str:
    return user.scope_path("masterSets", set_id, "cards")


async def _publish(
    session: AsyncSession,
    user: UserSession,
    set_id: str,
    membership: VariantMembership,
    feed: ChangeFeed,
) -> None:
    snapshot = await _entries_response(session, user, set_id, membership)
    feed.publish(_feed_scope(user, set_id), snapshot.model_dump(mode="json"))


@router.get("", response_model=list[SummaryResponse])
async def get_master_set_summaries(user: UserDep, session: SessionDep) -> list[SummaryResponse]:
    """List completion of every master set the user has started."""
    rows = await list_master_set_summaries(session, user.user_id)
    return [SummaryResponse.from_summary(summary_to_model(row)) for row in rows]


@router.get("/{set_id}", response_model=MasterSetResponse)
async def get_master_set(
    set_id: str,
    user: UserDep,
    session: SessionDep,
    membership: MembershipDep,
    catalog: CatalogDep,
    search: str = "",
    sort: Literal["number-asc", "number-desc", "name"] = "number-asc",
) -> MasterSetResponse:
    """
    Get a set page: catalog cards with the user's owned variants.

    Once the user has started the set, reading it refreshes the stored summary
    with the catalog's card total. Browsing an untouched set stores nothing.
    """
    card_set = await catalog.get_set(set_id)
    set_cards = await catalog.get_set_cards(set_id)
    entries = {entry.card.id: entry for entry in await _entries(session, user, set_id)}

    summary = None
    started = bool(entries) or (
        await get_master_set_summary(session, user.user_id, set_id) is not None
    )
    if card_set.total and started:
        reconciler = OwnershipReconciler(session, user, membership)
        summary = await reconciler.refresh_master_set_summary(set_id, card_set.total)

    cards = []
    for card in sort_set_cards(set_cards, search, sort):
        entry = entries.get(card.id)
        cards.append(
            CardEntryResponse(
                card_id=card.id,
                card=card.to_snapshot(),
                variants=ordered(classify(card, membership)),
                owned=entry.owned if entry is not None else {},
            )
        )

    stats = set_variant_stats(set_cards, entries.values(), membership)
    return MasterSetResponse(
        set=SetInfo(
            id=card_set.id,
            name=card_set.name,
            series=card_set.series,
            total=card_set.total,
            printed_total=card_set.printed_total,
            release_date=card_set.release_date,
            images=card_set.images,
        ),
        cards=cards,
        variant_stats=[VariantStatResponse(**vars(stat)) for stat in stats],
        summary=SummaryResponse.from_summary(summary) if summary is not None else None,
    )


@router.post("/{set_id}/cards/{card_id}/toggle", response_model=ToggleResponse)
async def toggle_master_set_variant(
    set_id: str,
    card_id: str,
    request: ToggleRequest,
    user: UserDep,
    session: SessionDep,
    membership: MembershipDep,
    feed: FeedDep,
) -> ToggleResponse:
    """
    Flip one variant of a card in a master set.

    The entry's owned map is rebuilt from the card's current variants. The
    owned-card index and the set's summary are updated in the same
    transaction.
    """
    card = parse_card(request.card, card_id)
    reconciler = OwnershipReconciler(session, user, membership)
    owned = await reconciler.toggle_variant(
        ScopeRef.master_set(set_id), card, request.variant, request.set_total
    )
    summary_row = await get_master_set_summary(session, user.user_id, set_id)

    await session.commit()
    await _publish(session, user, set_id, membership, feed)

    return ToggleResponse(
        card_id=card_id,
        variant=request.variant,
        owned=owned,
        summary=(
            SummaryResponse.from_summary(summary_to_model(summary_row))
            if summary_row is not None
            else None
        ),
    )


@router.websocket("/{set_id}/cards/feed")
async def master_set_cards_feed(
    websocket: WebSocket,
    user_id: str,
    set_id: str,
    feed: FeedDep,
    session_factory: SessionFactoryDep,
) -> None:
    """Stream a master set's entries: the current list, then every committed change."""
    user = get_user_session(user_id)
    await websocket.accept()

    async with feed.subscribe(_feed_scope(user, set_id)) as subscription:
        async with session_factory() as session:
            membership = await get_variant_membership(session)
            initial = await _entries_response(session, user, set_id, membership)

        await relay_snapshots(websocket, subscription, initial.model_dump(mode="json"))
