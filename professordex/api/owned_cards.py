"""
Owned-card index and dashboard endpoints.

The owned-card index is the cross-collection view of what a user owns. It
also backs the dashboard counters.
"""

from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel, Field

from professordex.api.deps import MembershipDep, SessionDep, UserDep
from professordex.db import list_owned_cards
from professordex.services.ownership import OwnershipReconciler
from professordex.services.stats import build_dashboard

router = APIRouter(prefix="/users/{user_id}", tags=["owned-cards"])


class OwnedCardResponse(BaseModel):
    """Response model for one owned-card index row."""

    card_id: str
    name: str
    images: dict[str, str] = Field(default_factory=dict)
    supertype: str = ""
    rarity: str | None = None
    owned: bool
    variants: dict[str, bool] = Field(default_factory=dict)
    collections: list[str] = Field(
        default_factory=list,
        description="Collection ids and set ids that recorded this card",
    )
    updated_at: datetime | None = None


class BackfillResponse(BaseModel):
    """Response model for an owned-card backfill."""

    entries: int
    master_sets: list[str] = Field(default_factory=list)
    summaries: int = 0
    message: str = ""


class RarityCountResponse(BaseModel):
    rarity: str
    symbol: str
    count: int


class DashboardResponse(BaseModel):
    """Response model for the dashboard counters."""

    user_id: str
    total_cards_owned: int = 0
    total_decks: int = 0
    master_sets_completed: int = 0
    by_type: dict[str, int] = Field(
        default_factory=dict,
        description="Owned cards by supertype (Pokémon, Trainer, Energy)",
    )
    by_rarity: list[RarityCountResponse] = Field(default_factory=list)


@router.get("/owned-cards", response_model=list[OwnedCardResponse])
async def get_owned_cards(
    user: UserDep, session: SessionDep, owned_only: bool = True
) -> list[OwnedCardResponse]:
    """List the user's owned-card index, by default only cards with an owned variant."""
    rows = await list_owned_cards(session, user.user_id, owned_only=owned_only)
    return [
        OwnedCardResponse(
            card_id=row.card_id,
            name=row.name,
            images=row.images or {},
            supertype=row.supertype,
            rarity=row.rarity,
            owned=row.owned,
            variants=row.variants or {},
            collections=row.collections or [],
            updated_at=row.updated_at,
        )
        for row in rows
    ]


@router.post("/owned-cards/backfill", response_model=BackfillResponse)
async def backfill_owned_cards(
    user: UserDep, session: SessionDep, membership: MembershipDep
) -> BackfillResponse:
    """
    Rebuild the owned-card index and master sets from every collection.

    Safe to run more than once; entries are merged, not duplicated.
    """
    result = await OwnershipReconciler(session, user, membership).backfill()
    return BackfillResponse(
        entries=result.entries,
        master_sets=result.master_sets,
        summaries=result.summaries,
        message="Backfill complete!",
    )


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(user: UserDep, session: SessionDep) -> DashboardResponse:
    """Get the dashboard counters."""
    stats = await build_dashboard(session, user)
    return DashboardResponse(
        user_id=user.user_id,
        total_cards_owned=stats.total_cards_owned,
        total_decks=stats.total_decks,
        master_sets_completed=stats.master_sets_completed,
        by_type=stats.by_type,
        by_rarity=[
            RarityCountResponse(rarity=r.rarity, symbol=r.symbol, count=r.count)
            for r in stats.by_rarity
        ],
    )
