"""
Deck API endpoints.

Provides CRUD for user decks, card add/remove under the deck rules, and
plain-text export.
"""

import logging
from typing import Any, Literal
from urllib.parse import quote

from fastapi import APIRouter, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from professordex.api.deps import SessionDep, UserDep, parse_card
from professordex.api.schemas import DeleteResponse
from professordex.config import DECK_SIZE
from professordex.db import create_deck, deck_to_model, delete_deck, get_deck, list_decks, save_deck
from professordex.models.deck import Deck, DeckCard, PlayerInfo
from professordex.models.failure import NotFoundError
from professordex.models.session import UserSession
from professordex.services.deck_export import (
    export_filename,
    generate_event_export_text,
    generate_export_text,
)
from professordex.services.deck_rules import add_card, categorize, remove_card
from professordex.services.name_validation import validate_name

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users/{user_id}/decks", tags=["decks"])


class DeckCreateRequest(BaseModel):
    """Request model for creating a deck."""

    name: str = Field(..., description="Deck name", examples=["Charizard ex"])


class DeckStackRequest(BaseModel):
    card: dict[str, Any] = Field(..., description="Catalog card")
    quantity: int = Field(default=1, ge=1)


class DeckUpdateRequest(BaseModel):
    """
    Request model for saving a deck.

    Cards are re-added one copy at a time, so a saved list obeys the same
    rules as cards added individually.
    """

    name: str | None = None
    cards: list[DeckStackRequest] | None = None


class AddCardRequest(BaseModel):
    card: dict[str, Any] = Field(..., description="Catalog card as returned by the deck search")


class DeckStackResponse(BaseModel):
    card_id: str
    card: dict[str, Any]
    quantity: int


class DeckResponse(BaseModel):
    """Response model for a single deck."""

    id: str
    name: str
    cards: list[DeckStackResponse] = Field(default_factory=list)
    total_cards: int = 0
    target_size: int = DECK_SIZE
    categories: dict[str, int] = Field(
        default_factory=dict,
        description="Copies per section (Pokémon, Trainer, Energy)",
    )


class DeckSummaryResponse(BaseModel):
    id: str
    name: str
    total_cards: int = 0


class PlayerInfoRequest(BaseModel):
    name: str = ""
    dob: str = ""
    player_id: str = ""
    event_name: str = ""
    event_date: str = ""


class ExportRequest(BaseModel):
    """Request model for exporting a deck."""

    format: Literal["simple", "event"] = Field(
        default="simple",
        description="simple: deck list only; event: deck list with player details",
    )
    player: PlayerInfoRequest | None = None


def _deck_response(deck: Deck) -> DeckResponse:
    return DeckResponse(
        id=deck.id,
        name=deck.name,
        cards=[
            DeckStackResponse(
                card_id=stack.card.id, card=stack.card.to_snapshot(), quantity=stack.quantity
            )
            for stack in deck.cards
        ],
        total_cards=deck.total_cards(),
        categories={
            category: sum(stack.quantity for stack in stacks)
            for category, stacks in categorize(deck.cards).items()
        },
    )


async def _load_deck(session: AsyncSession, user: UserSession, deck_id: str) -> Deck:
    row = await get_deck(session, user.user_id, deck_id)
    if row is None:
        raise NotFoundError("Deck", deck_id)
    return deck_to_model(row)


async def _store(
    session: AsyncSession,
    user: UserSession,
    deck_id: str,
    cards: list[DeckCard],
    name: str | None = None,
) -> Deck:
    row = await save_deck(session, user.user_id, deck_id, cards, name)
    if row is None:
        raise NotFoundError("Deck", deck_id)
    return deck_to_model(row)


@router.get("", response_model=list[DeckSummaryResponse])
async def get_user_decks(user: UserDep, session: SessionDep) -> list[DeckSummaryResponse]:
    """List a user's decks, oldest first."""
    decks = [deck_to_model(row) for row in await list_decks(session, user.user_id)]
    return [DeckSummaryResponse(id=d.id, name=d.name, total_cards=d.total_cards()) for d in decks]


@router.post("", response_model=DeckResponse, status_code=status.HTTP_201_CREATED)
async def create_user_deck(
    request: DeckCreateRequest, user: UserDep, session: SessionDep
) -> DeckResponse:
    """Create a new, empty deck."""
    name = validate_name(request.name, "Deck")
    row = await create_deck(session, user.user_id, name)
    logger.info("User %s created deck %s", user.user_id, row.id)
    return _deck_response(deck_to_model(row))


@router.get("/{deck_id}", response_model=DeckResponse)
async def get_user_deck(deck_id: str, user: UserDep, session: SessionDep) -> DeckResponse:
    """Get one deck with section counts."""
    return _deck_response(await _load_deck(session, user, deck_id))


@router.put("/{deck_id}", response_model=DeckResponse)
async def update_user_deck(
    deck_id: str, request: DeckUpdateRequest, user: UserDep, session: SessionDep
) -> DeckResponse:
    """
    Save a deck's name and/or card list.

    A card list that breaks a deck rule is refused as a whole.
    """
    deck = await _load_deck(session, user, deck_id)
    name = validate_name(request.name, "Deck") if request.name is not None else None

    cards = deck.cards
    if request.cards is not None:
        cards = []
        for stack in request.cards:
            card = parse_card(stack.card)
            for _ in range(stack.quantity):
                cards = add_card(cards, card)

    return _deck_response(await _store(session, user, deck_id, cards, name))


@router.delete("/{deck_id}", response_model=DeleteResponse)
async def delete_user_deck(deck_id: str, user: UserDep, session: SessionDep) -> DeleteResponse:
    """Delete a deck."""
    deleted = await delete_deck(session, user.user_id, deck_id)
    if not deleted:
        raise NotFoundError("Deck", deck_id)
    return DeleteResponse(deleted=True, message="Deck deleted.")


@router.post("/{deck_id}/cards", response_model=DeckResponse)
async def add_deck_card(
    deck_id: str, request: AddCardRequest, user: UserDep, session: SessionDep
) -> DeckResponse:
    """
    Add one copy of a card.

    Refused with 409 when the copy would break a deck rule.
    """
    card = parse_card(request.card)
    deck = await _load_deck(session, user, deck_id)
    cards = add_card(deck.cards, card)
    return _deck_response(await _store(session, user, deck_id, cards))


@router.delete("/{deck_id}/cards/{card_id}", response_model=DeckResponse)
async def remove_deck_card(
    deck_id: str, card_id: str, user: UserDep, session: SessionDep
) -> DeckResponse:
    """Remove one copy of a card. The stack disappears with its last copy."""
    deck = await _load_deck(session, user, deck_id)
    cards = remove_card(deck.cards, card_id)
    return _deck_response(await _store(session, user, deck_id, cards))


@router.post("/{deck_id}/export", response_class=PlainTextResponse)
async def export_user_deck(
    deck_id: str, request: ExportRequest, user: UserDep, session: SessionDep
) -> PlainTextResponse:
    """Download a deck as a plain-text list."""
    deck = await _load_deck(session, user, deck_id)

    if request.format == "event":
        player = request.player or PlayerInfoRequest()
        content = generate_event_export_text(deck, PlayerInfo(**player.model_dump()))
    else:
        content = generate_export_text(deck)

    return PlainTextResponse(
        content,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(export_filename(deck))}"
        },
    )
