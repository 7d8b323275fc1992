"""
Catalog endpoints.

Card search for the dashboard and collection pages, deck-builder search,
the set browser, and the shared pattern-variant lists.
"""

from typing import Annotated, Any, Literal

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from professordex.api.deps import CatalogDep, MembershipDep, SessionDep
from professordex.db import (
    list_master_set_summaries,
    list_variant_memberships,
    set_variant_membership,
    summary_to_model,
)
from professordex.models.card import Card
from professordex.models.failure import FailureKind, KnownError
from professordex.models.ownership import MasterSetSummary, VariantMembership
from professordex.services.card_search import EnergyType, deck_search
from professordex.services.set_catalog import available_series, browsable_sets, filter_sets
from professordex.services.variants import PATTERN_VARIANTS, classify, label, ordered

router = APIRouter(tags=["catalog"])


class CardResult(BaseModel):
    """A catalog card with the variants a collector can own."""

    card_id: str
    card: dict[str, Any]
    variants: list[str] = Field(default_factory=list)
    variant_labels: list[str] = Field(default_factory=list)

    @classmethod
    def from_card(cls, card: Card, membership: VariantMembership) -> "CardResult":
        variants = ordered(classify(card, membership))
        return cls(
            card_id=card.id,
            card=card.to_snapshot(),
            variants=variants,
            variant_labels=[label(v) for v in variants],
        )


class CardSearchResponse(BaseModel):
    query: str
    cards: list[CardResult] = Field(default_factory=list)
    count: int = 0


class SetResult(BaseModel):
    id: str
    name: str
    series: str
    total: int | None = None
    release_date: str | None = None
    images: dict[str, str] = Field(default_factory=dict)
    owned: int = Field(default=0, description="Cards the user has in this master set")
    completed: bool = False


class SetListResponse(BaseModel):
    sets: list[SetResult] = Field(default_factory=list)
    series: list[str] = Field(default_factory=list, description="Series available to filter by")


class VariantMembershipRequest(BaseModel):
    card_ids: list[str] = Field(..., examples=[["sv3pt5-25", "sv3pt5-1"]])


class VariantMembershipResponse(BaseModel):
    variant: str
    card_ids: list[str] = Field(default_factory=list)


@router.get("/cards/search", response_model=CardSearchResponse)
async def search_cards(
    catalog: CatalogDep,
    membership: MembershipDep,
    q: Annotated[str, Query(min_length=1, description="Search term")],
    field: Literal["name", "artist", "setName"] = "name",
) -> CardSearchResponse:
    """Search the catalog by card name, artist or set name."""
    cards = await catalog.search(q, field)
    return CardSearchResponse(
        query=q,
        cards=[CardResult.from_card(card, membership) for card in cards],
        count=len(cards),
    )


@router.get("/cards/deck-search", response_model=CardSearchResponse)
async def search_deck_cards(
    catalog: CatalogDep,
    membership: MembershipDep,
    q: Annotated[str, Query(min_length=1, description="Card name or its start")],
    energy_type: EnergyType = "All",
) -> CardSearchResponse:
    """
    Search for Standard-legal cards to add to a deck.

    Accents are optional ("pokemon" finds "Pokémon"). Every printing of a
    name is returned when any printing is legal.
    """
    cards = await deck_search(catalog, q, energy_type)
    return CardSearchResponse(
        query=q,
        cards=[CardResult.from_card(card, membership) for card in cards],
        count=len(cards),
    )


@router.get("/sets", response_model=SetListResponse)
async def list_sets(
    catalog: CatalogDep,
    session: SessionDep,
    user_id: str | None = None,
    search: str = "",
    series: str = "all",
    completion: Literal["all", "completed", "incomplete"] = "all",
    sort: Literal["newest", "oldest", "name"] = "newest",
) -> SetListResponse:
    """
    Browse catalog sets.

    Pass user_id to overlay master-set completion and to filter by it.
    """
    sets = await catalog.list_sets()

    summaries: dict[str, MasterSetSummary] = {}
    if user_id:
        rows = await list_master_set_summaries(session, user_id)
        summaries = {row.set_id: summary_to_model(row) for row in rows}

    results = []
    for card_set in filter_sets(sets, summaries, search, series, completion, sort):
        summary = summaries.get(card_set.id)
        results.append(
            SetResult(
                id=card_set.id,
                name=card_set.name,
                series=card_set.series,
                total=card_set.total,
                release_date=card_set.release_date,
                images=card_set.images,
                owned=summary.owned if summary is not None else 0,
                completed=summary.completed if summary is not None else False,
            )
        )

    return SetListResponse(sets=results, series=available_series(browsable_sets(sets)))


@router.get("/card-variants", response_model=list[VariantMembershipResponse])
async def get_card_variants(session: SessionDep) -> list[VariantMembershipResponse]:
    """List the card ids known to carry each pattern variant."""
    rows = await list_variant_memberships(session)
    return [VariantMembershipResponse(variant=row.variant, card_ids=row.card_ids) for row in rows]


@router.put("/card-variants/{variant}", response_model=VariantMembershipResponse)
async def put_card_variants(
    variant: str, request: VariantMembershipRequest, session: SessionDep
) -> VariantMembershipResponse:
    """Replace the card ids listed for a pattern variant."""
    if variant not in PATTERN_VARIANTS:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message=f"'{variant}' is not a pattern variant",
            suggestion=f"Use one of: {', '.join(PATTERN_VARIANTS)}",
        )

    row = await set_variant_membership(session, variant, request.card_ids)
    return VariantMembershipResponse(variant=row.variant, card_ids=row.card_ids)
