"""
Pokémon TCG catalog client.

Reads cards and sets from api.pokemontcg.io. The catalog is read-only and
the service never caches it; every call is a fresh request.
"""

import logging
from dataclasses import dataclass
from typing import Any, Literal

import httpx

from professordex.config import settings
from professordex.models.card import Card, CardSet
from professordex.models.failure import FailureKind, KnownError

logger = logging.getLogger(__name__)

SearchField = Literal["name", "artist", "setName"]


class CatalogError(KnownError):
    """Raised when the card catalog cannot be reached or answers with an error."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message=message,
            detail=detail,
            suggestion="The card catalog may be busy. Try again in a moment.",
            status_code=502,
        )


@dataclass
class CardPage:
    """One page of a card query."""

    cards: list[Card]
    page: int
    page_size: int
    total_count: int


def build_query(term: str, field: SearchField = "name") -> str:
    """
    Build a catalog query string for a free-text search.

    Name and set-name searches are wildcard matches; artist searches are
    exact phrase matches.
    """
    if field == "artist":
        return f'artist:"{term}"'
    if field == "setName":
        return f"set.name:*{term}*"
    return f"name:*{term}*"


class TcgApiClient:
    """
    Client for the Pokémon TCG catalog API.

    Sends the API key as X-Api-Key when one is configured. Without a key the
    catalog still answers, at a lower rate limit.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        page_size: int | None = None,
    ) -> None:
        """
        Initialize the catalog client.

        Args:
            base_url: Catalog base URL. Defaults to settings.tcg_api_url.
            api_key: API key. Defaults to settings.tcg_api_key.
            timeout: Request timeout in seconds.
            page_size: Cards requested per page when paginating.
        """
        self.base_url = (base_url or settings.tcg_api_url).rstrip("/")
        self.api_key = settings.tcg_api_key if api_key is None else api_key
        self.timeout = timeout or settings.tcg_api_timeout
        self.page_size = page_size or settings.tcg_page_size

    def _headers(self) -> dict[str, str]:
        if self.api_key:
            return {"X-Api-Key": self.api_key}
        return {}

    async def _get(
        self, client: httpx.AsyncClient, path: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        try:
            response = await client.get(f"{self.base_url}{path}", params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("Catalog request %s failed with %d", path, e.response.status_code)
            raise CatalogError(
                "The card catalog returned an error.",
                detail=f"HTTP {e.response.status_code} for {path}",
            ) from e
        except httpx.HTTPError as e:
            logger.error("Catalog request %s failed: %s", path, e)
            raise CatalogError("Could not reach the card catalog.", detail=str(e)) from e

        data: dict[str, Any] = response.json()
        return data

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(headers=self._headers(), timeout=self.timeout)

    async def search_cards(
        self, query: str, page: int = 1, page_size: int | None = None
    ) -> CardPage:
        """
        Fetch one page of cards matching a catalog query.

        Args:
            query: Catalog query (e.g., 'name:"pika*"' or "set.id:sv3pt5")
            page: 1-based page number
            page_size: Cards per page. Defaults to the client's page size.

        Raises:
            CatalogError: If the request fails
        """
        async with self._client() as client:
            return await self._fetch_page(client, query, page, page_size or self.page_size)

    async def _fetch_page(
        self, client: httpx.AsyncClient, query: str, page: int, page_size: int
    ) -> CardPage:
        data = await self._get(
            client, "/cards", params={"q": query, "page": page, "pageSize": page_size}
        )
        cards = [Card.from_api(item) for item in data.get("data") or []]
        return CardPage(
            cards=cards,
            page=page,
            page_size=page_size,
            total_count=int(data.get("totalCount") or len(cards)),
        )

    async def fetch_all(self, query: str) -> list[Card]:
        """
        Fetch every card matching a query, following pagination.

        Stops when the accumulated count reaches the reported total or a page
        comes back empty.
        """
        cards: list[Card] = []
        page = 1

        async with self._client() as client:
            while True:
                result = await self._fetch_page(client, query, page, self.page_size)
                if not result.cards:
                    break
                cards.extend(result.cards)
                if len(cards) >= result.total_count:
                    break
                page += 1

        logger.debug("Fetched %d cards for %s in %d page(s)", len(cards), query, page)
        return cards

    async def search(self, term: str, field: SearchField = "name") -> list[Card]:
        """Search the catalog by name, artist or set name."""
        term = term.strip()
        if not term:
            return []
        return await self.fetch_all(build_query(term, field))

    async def get_set_cards(self, set_id: str) -> list[Card]:
        """Fetch every card of a set."""
        return await self.fetch_all(f"set.id:{set_id}")

    async def get_set(self, set_id: str) -> CardSet:
        """
        Fetch one set.

        Raises:
            CatalogError: If the set does not exist or the request fails
        """
        async with self._client() as client:
            data = await self._get(client, f"/sets/{set_id}")
        return CardSet.from_api(data["data"])

    async def list_sets(self) -> list[CardSet]:
        """Fetch every set the catalog knows about."""
        async with self._client() as client:
            data = await self._get(client, "/sets")
        return [CardSet.from_api(item) for item in data.get("data") or []]


# Default client instance
_client: TcgApiClient | None = None


def get_tcg_client() -> TcgApiClient:
    """
    Get the default catalog client instance.

    Returns:
        Singleton TcgApiClient instance
    """
    global _client
    if _client is None:
        _client = TcgApiClient()
    return _client
