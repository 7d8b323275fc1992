from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Card:
    """
    A single printing from the Pokémon TCG catalog.

    Attributes:
        id: Catalog card id (e.g., "sv3pt5-1"), unique per printing
        name: Card name as printed
        supertype: "Pokémon", "Trainer" or "Energy"
        subtypes: Subtype tags (e.g., "Basic", "ACE SPEC", "Item")
        types: Energy types for Pokémon and energy cards (e.g., "Fire")
        rarity: Rarity name exactly as the catalog reports it
        number: Collector number within the set (not always numeric)
        artist: Illustrator credit
        regulation_mark: Tournament rule era code (e.g., "G"), if printed
        set_id: Catalog set id (e.g., "sv3pt5")
        set_name: Set display name
        set_series: Series the set belongs to (e.g., "Scarlet & Violet")
        images: Image URLs keyed by size ("small", "large")
        prices: TCGplayer price points keyed by finish ("normal", "holofoil", ...)
    """

    id: str
    name: str
    supertype: str = ""
    subtypes: tuple[str, ...] = ()
    types: tuple[str, ...] = ()
    rarity: str | None = None
    number: str = ""
    artist: str | None = None
    regulation_mark: str | None = None
    set_id: str = ""
    set_name: str = ""
    set_series: str = ""
    images: dict[str, str] = field(default_factory=dict, hash=False, compare=False)
    prices: dict[str, Any] = field(default_factory=dict, hash=False, compare=False)

    @property
    def price_points(self) -> frozenset[str]:
        """Finishes the catalog lists a price for."""
        return frozenset(key for key, value in self.prices.items() if value is not None)

    @property
    def is_energy(self) -> bool:
        return self.supertype == "Energy"

    @property
    def is_basic_energy(self) -> bool:
        return self.is_energy and "Basic" in self.subtypes

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Card":
        """
        Build a card from a catalog payload or a stored snapshot.

        Snapshots use the catalog's own field names, so the same parser
        handles both.
        """
        card_set = data.get("set") or {}
        tcgplayer = data.get("tcgplayer") or {}
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            supertype=data.get("supertype", ""),
            subtypes=tuple(data.get("subtypes") or ()),
            types=tuple(data.get("types") or ()),
            rarity=data.get("rarity"),
            number=str(data.get("number", "")),
            artist=data.get("artist"),
            regulation_mark=data.get("regulationMark"),
            set_id=card_set.get("id", ""),
            set_name=card_set.get("name", ""),
            set_series=card_set.get("series", ""),
            images=dict(data.get("images") or {}),
            prices=dict(tcgplayer.get("prices") or {}),
        )

    def to_snapshot(self) -> dict[str, Any]:
        """Catalog fields copied into ownership and deck rows."""
        return {
            "id": self.id,
            "name": self.name,
            "number": self.number,
            "supertype": self.supertype,
            "subtypes": list(self.subtypes),
            "types": list(self.types),
            "rarity": self.rarity,
            "artist": self.artist,
            "regulationMark": self.regulation_mark,
            "set": {"id": self.set_id, "name": self.set_name, "series": self.set_series},
            "images": dict(self.images),
            "tcgplayer": {"prices": dict(self.prices)},
        }


@dataclass(frozen=True)
class CardSet:
    """
    A card-set release from the catalog.

    Attributes:
        id: Catalog set id
        name: Set display name
        series: Series name used for grouping
        total: Number of cards in the set including secret rares
        printed_total: Number printed on the cards ("/198")
        release_date: Release date as the catalog formats it ("2023/09/22")
        images: Logo and symbol URLs
    """

    id: str
    name: str
    series: str = ""
    total: int | None = None
    printed_total: int | None = None
    release_date: str | None = None
    images: dict[str, str] = field(default_factory=dict, hash=False, compare=False)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "CardSet":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            series=data.get("series", ""),
            total=data.get("total"),
            printed_total=data.get("printedTotal"),
            release_date=data.get("releaseDate"),
            images=dict(data.get("images") or {}),
        )
