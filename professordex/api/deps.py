"""
Shared request dependencies.

Every user-scoped route takes the user id from its path and gets a
UserSession built from it here; services receive that session explicitly.
"""

from typing import Annotated, Any

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from professordex.db.database import get_session, get_session_factory
from professordex.db.operations import get_variant_membership
from professordex.models.card import Card
from professordex.models.failure import FailureKind, KnownError
from professordex.models.ownership import VariantMembership
from professordex.models.session import UserSession
from professordex.services.subscriptions import ChangeFeed, get_change_feed
from professordex.services.tcg_api import TcgApiClient, get_tcg_client


def get_user_session(user_id: str) -> UserSession:
    """Build the acting user's session from the `{user_id}` path segment."""
    return UserSession(user_id=user_id)


async def get_membership(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> VariantMembership:
    """Load the pattern-variant lists once per request."""
    return await get_variant_membership(session)


SessionDep = Annotated[AsyncSession, Depends(get_session)]
SessionFactoryDep = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]
UserDep = Annotated[UserSession, Depends(get_user_session)]
CatalogDep = Annotated[TcgApiClient, Depends(get_tcg_client)]
FeedDep = Annotated[ChangeFeed, Depends(get_change_feed)]
MembershipDep = Annotated[VariantMembership, Depends(get_membership)]


def parse_card(payload: dict[str, Any], card_id: str | None = None) -> Card:
    """
    Read a catalog card sent in a request body.

    Args:
        payload: Catalog-shaped card dict
        card_id: Card id from the URL, when the route has one

    Raises:
        KnownError: If the payload has no id or names a different card
    """
    if not payload.get("id"):
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message="Card data is missing its id",
        )
    if card_id is not None and payload["id"] != card_id:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message="Card data does not match the card in the URL",
            detail=f"Expected id '{card_id}', got '{payload.get('id')}'",
        )
    return Card.from_api(payload)
