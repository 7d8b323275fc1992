"""Tests for collection API endpoints."""

import pytest
from httpx import AsyncClient

from professordex.services.subscriptions import get_change_feed

BASE = "/users/user-1/collections"


async def create(client: AsyncClient, name: str = "Binder") -> str:
    response = await client.post(BASE, json={"name": name})
    assert response.status_code == 201
    return response.json()["id"]


async def toggle(client: AsyncClient, collection_id: str, payload: dict, variant: str):
    return await client.post(
        f"{BASE}/{collection_id}/cards/{payload['id']}/toggle",
        json={"variant": variant, "card": payload},
    )


@pytest.fixture
def bulbasaur(make_payload) -> dict:
    return make_payload(card_id="sv3pt5-1", name="Bulbasaur")


class TestCollectionCrud:
    async def test_create_and_list(self, client: AsyncClient) -> None:
        """New collections are listed with zero counts."""
        await create(client, "Trade pile")
        await create(client, "Binder")

        response = await client.get(BASE)

        assert response.status_code == 200
        data = response.json()
        assert [c["name"] for c in data] == ["Binder", "Trade pile"]
        assert data[0]["card_count"] == 0
        assert data[0]["held_count"] == 0

    async def test_name_is_trimmed(self, client: AsyncClient) -> None:
        response = await client.post(BASE, json={"name": "  Binder  "})

        assert response.json()["name"] == "Binder"

    async def test_empty_name_rejected(self, client: AsyncClient) -> None:
        response = await client.post(BASE, json={"name": "   "})

        assert response.status_code == 400
        data = response.json()
        assert data["outcome"] == "known_failure"
        assert data["failure"]["kind"] == "invalid_input"
        assert data["failure"]["message"] == "Collection name cannot be empty"

    async def test_long_name_rejected(self, client: AsyncClient) -> None:
        response = await client.post(BASE, json={"name": "x" * 31})

        assert response.status_code == 400

    async def test_rename(self, client: AsyncClient) -> None:
        collection_id = await create(client)

        response = await client.patch(f"{BASE}/{collection_id}", json={"name": "Binder 2"})

        assert response.status_code == 200
        assert response.json()["name"] == "Binder 2"

    async def test_rename_missing(self, client: AsyncClient) -> None:
        response = await client.patch(f"{BASE}/missing", json={"name": "Binder 2"})

        assert response.status_code == 404
        assert response.json()["failure"]["kind"] == "not_found"

    async def test_delete(self, client: AsyncClient) -> None:
        collection_id = await create(client)

        response = await client.delete(f"{BASE}/{collection_id}")

        assert response.status_code == 200
        assert response.json()["deleted"] is True
        assert (await client.delete(f"{BASE}/{collection_id}")).status_code == 404

    async def test_collections_are_per_user(self, client: AsyncClient) -> None:
        collection_id = await create(client)

        response = await client.get(f"/users/user-2/collections/{collection_id}/cards")

        assert response.status_code == 404


class TestToggle:
    async def test_first_toggle_creates_entry(self, client: AsyncClient, bulbasaur) -> None:
        collection_id = await create(client)

        response = await toggle(client, collection_id, bulbasaur, "reverseHolo")

        assert response.status_code == 200
        assert response.json()["owned"] == {"reverseHolo": True}

        cards = (await client.get(f"{BASE}/{collection_id}/cards")).json()
        assert cards["cards"][0]["card_id"] == "sv3pt5-1"
        assert cards["cards"][0]["variants"] == ["normal", "reverseHolo"]
        assert cards["cards"][0]["quantity"] == 0
        assert cards["variant_totals"] == {"reverseHolo": 1}
        assert cards["owned_variants"][0]["variant"] == "reverseHolo"

    async def test_toggle_updates_owned_index(self, client: AsyncClient, bulbasaur) -> None:
        collection_id = await create(client)
        await toggle(client, collection_id, bulbasaur, "normal")

        response = await client.get("/users/user-1/owned-cards")

        data = response.json()
        assert [row["card_id"] for row in data] == ["sv3pt5-1"]
        assert data[0]["collections"] == [collection_id]

    async def test_unavailable_variant(self, client: AsyncClient, bulbasaur) -> None:
        collection_id = await create(client)

        response = await toggle(client, collection_id, bulbasaur, "holo")

        assert response.status_code == 400
        assert response.json()["failure"]["message"] == "Bulbasaur has no Holo variant"
        cards = (await client.get(f"{BASE}/{collection_id}/cards")).json()
        assert cards["cards"] == []

    async def test_card_mismatch(self, client: AsyncClient, bulbasaur) -> None:
        collection_id = await create(client)

        response = await client.post(
            f"{BASE}/{collection_id}/cards/sv3pt5-2/toggle",
            json={"variant": "normal", "card": bulbasaur},
        )

        assert response.status_code == 400
        assert "does not match" in response.json()["failure"]["message"]

    async def test_missing_collection(self, client: AsyncClient, bulbasaur) -> None:
        response = await toggle(client, "missing", bulbasaur, "normal")

        assert response.status_code == 404

    async def test_publishes_card_list(self, client: AsyncClient, bulbasaur) -> None:
        collection_id = await create(client)
        scope = f"users/user-1/collections/{collection_id}/cards"

        async with get_change_feed().subscribe(scope) as subscription:
            await toggle(client, collection_id, bulbasaur, "normal")

            assert subscription.pending() == 1
            snapshot = await subscription.get()

        assert snapshot["cards"][0]["owned"] == {"normal": True}


class TestQuantityAndBatch:
    async def test_quantity_floors_at_zero(self, client: AsyncClient, bulbasaur) -> None:
        collection_id = await create(client)
        await toggle(client, collection_id, bulbasaur, "normal")
        url = f"{BASE}/{collection_id}/cards/sv3pt5-1/quantity"

        assert (await client.post(url, json={"delta": 2})).json()["quantity"] == 2
        assert (await client.post(url, json={"delta": -3})).json()["quantity"] == 0

        listing = (await client.get(BASE)).json()
        assert listing[0]["held_count"] == 0
        assert listing[0]["card_count"] == 1

    async def test_quantity_missing_entry(self, client: AsyncClient) -> None:
        collection_id = await create(client)

        response = await client.post(
            f"{BASE}/{collection_id}/cards/nope-1/quantity", json={"delta": 1}
        )

        assert response.status_code == 404

    async def test_mark_all(self, client: AsyncClient, bulbasaur, make_payload) -> None:
        collection_id = await create(client)
        await toggle(client, collection_id, bulbasaur, "normal")
        await toggle(client, collection_id, make_payload(card_id="sv3pt5-2"), "normal")

        response = await client.post(f"{BASE}/{collection_id}/mark-all", json={"owned": True})

        assert response.json() == {"updated": 2, "message": "Marked 2 cards as owned."}
        cards = (await client.get(f"{BASE}/{collection_id}/cards")).json()
        assert cards["variant_totals"] == {"normal": 2, "reverseHolo": 2}

    async def test_recalculate(self, client: AsyncClient, bulbasaur) -> None:
        collection_id = await create(client)
        await toggle(client, collection_id, bulbasaur, "normal")

        response = await client.post(f"{BASE}/{collection_id}/recalculate")

        assert response.status_code == 200
        assert response.json()["updated"] == 1
        cards = (await client.get(f"{BASE}/{collection_id}/cards")).json()
        assert cards["cards"][0]["owned"] == {"normal": True, "reverseHolo": False}
