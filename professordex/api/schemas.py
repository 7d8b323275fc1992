"""Request and response models shared by the ownership routers."""

from typing import Any

from pydantic import BaseModel, Field

from professordex.models.ownership import MasterSetSummary, OwnershipEntry, VariantMembership
from professordex.services.variants import classify, ordered


class CardEntryResponse(BaseModel):
    """One card's ownership state within a collection or master set."""

    card_id: str
    card: dict[str, Any]
    variants: list[str] = Field(
        default_factory=list,
        description="Variants the card carries, in display order",
    )
    owned: dict[str, bool] = Field(default_factory=dict)
    quantity: int = 0

    @classmethod
    def from_entry(
        cls, entry: OwnershipEntry, membership: VariantMembership
    ) -> "CardEntryResponse":
        return cls(
            card_id=entry.card.id,
            card=entry.card.to_snapshot(),
            variants=ordered(classify(entry.card, membership)),
            owned=entry.owned,
            quantity=entry.quantity,
        )


class ToggleRequest(BaseModel):
    """Request model for flipping one variant of one card."""

    variant: str = Field(..., description="Variant key", examples=["reverseHolo"])
    card: dict[str, Any] = Field(
        ...,
        description="Catalog card as returned by the card search",
    )
    set_total: int | None = Field(
        default=None,
        ge=1,
        description="Card count of the set (master sets only)",
    )


class SummaryResponse(BaseModel):
    """Completion of one master set."""

    set_id: str
    owned: int
    total: int
    completed: bool
    completion_percentage: float

    @classmethod
    def from_summary(cls, summary: MasterSetSummary) -> "SummaryResponse":
        return cls(
            set_id=summary.set_id,
            owned=summary.owned,
            total=summary.total,
            completed=summary.completed,
            completion_percentage=summary.completion_percentage,
        )


class ToggleResponse(BaseModel):
    """Response model for a variant toggle."""

    card_id: str
    variant: str
    owned: dict[str, bool]
    summary: SummaryResponse | None = None


class BatchResponse(BaseModel):
    """Response model for operations that touch many entries."""

    updated: int
    message: str = ""


class DeleteResponse(BaseModel):
    """Response model for delete operations."""

    deleted: bool
    message: str = ""
