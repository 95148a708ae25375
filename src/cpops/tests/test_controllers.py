import typing as t
from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch

import orjson
import pytest
from django.test.client import Client
from django.urls import reverse
from django.utils import timezone
from kombu.exceptions import OperationalError

from common.throttling import ClaimThrottle
from cpops.minting import MintingError, MintingNotConfiguredError
from cpops.models import Claim, Cpop
from cpops.tests.constants import (
    CREATOR_WALLET,
    OTHER_WALLET,
    SIGNATURE,
    TOKYO_FAR_LAT,
    TOKYO_FAR_LNG,
    TOKYO_LAT,
    TOKYO_LNG,
    WALLET,
)

pytestmark = pytest.mark.django_db


def create_payload(now: datetime, **overrides: t.Any) -> dict[str, t.Any]:
    data: dict[str, t.Any] = {
        "event_name": "Breakpoint",
        "organizer_name": "Solana Foundation",
        "description": "Annual conference",
        "location": "Shibuya, Tokyo",
        "start_date": now.isoformat(),
        "end_date": (now + timedelta(hours=8)).isoformat(),
        "amount": 100,
        "image_url": "https://example.com/bp.png",
        "latitude": TOKYO_LAT,
        "longitude": TOKYO_LNG,
        "creator_address": CREATOR_WALLET,
        "token_address": "CoLLxkZRaVvG5dH3UhSVdAJ1qmQ9EXuvxLfqUBGkEH4f",
        "token_id": "TreeP4nVQVGyeMkZL4BLQ2wRsAQzKHjn1Z3tK9uVbE8",
        "token_uri": "https://arweave.net/bp.json",
        "token_metadata": {"name": "Breakpoint", "symbol": "BP"},
    }
    data.update(overrides)
    return data


def claim_params(cpop: Cpop, **overrides: t.Any) -> dict[str, t.Any]:
    params: dict[str, t.Any] = {"wallet_address": WALLET, "id": str(cpop.id), "lat": TOKYO_LAT, "lng": TOKYO_LNG}
    params.update(overrides)
    return {k: v for k, v in params.items() if v is not None}


class TestCreateCpop:
    url = reverse("api:create_cpop")

    def test_create(self, client: Client, now: datetime) -> None:
        response = client.post(self.url, data=orjson.dumps(create_payload(now)), content_type="application/json")

        assert response.status_code == 201, response.content
        data = response.json()
        cpop = Cpop.objects.get(pk=data["id"])
        assert cpop.event_name == "Breakpoint"
        assert cpop.claim_radius_meters == 200
        assert data["token_metadata"] == {"name": "Breakpoint", "symbol": "BP"}

    @pytest.mark.django_db(transaction=True)
    def test_created_even_when_map_publish_cannot_be_queued(self, client: Client, now: datetime) -> None:
        with patch("cpops.service.cpop_service.publish_cpop_to_map") as mock_task:
            mock_task.delay.side_effect = OperationalError("redis down")
            response = client.post(
                self.url, data=orjson.dumps(create_payload(now)), content_type="application/json"
            )

        assert response.status_code == 201, response.content
        mock_task.delay.assert_called_once_with(response.json()["id"])
        assert Cpop.objects.count() == 1

    def test_inverted_window_is_rejected(self, client: Client, now: datetime) -> None:
        payload = create_payload(now, end_date=(now - timedelta(hours=1)).isoformat())

        response = client.post(self.url, data=orjson.dumps(payload), content_type="application/json")

        assert response.status_code == 400
        assert "end_date" in response.json()["errors"]
        assert not Cpop.objects.exists()

    @pytest.mark.parametrize(
        "overrides",
        [
            {"latitude": 91},
            {"longitude": -181},
            {"amount": 0},
            {"creator_address": "not-a-wallet"},
            {"start_date": "2026-04-01T09:00:00"},
            {"event_name": ""},
            {"claim_radius_meters": 0},
        ],
    )
    def test_invalid_payload_is_rejected(self, client: Client, now: datetime, overrides: dict[str, t.Any]) -> None:
        payload = create_payload(now, **overrides)

        response = client.post(self.url, data=orjson.dumps(payload), content_type="application/json")

        assert response.status_code == 400
        assert "detail" in response.json()
        assert not Cpop.objects.exists()


class TestListCpops:
    url = reverse("api:list_cpops")

    def test_lists_a_creators_cpops_with_claim_counts(self, client: Client, cpop: Cpop) -> None:
        Claim.objects.create(cpop=cpop, wallet_address=WALLET, status=Claim.ClaimStatus.CLAIMED)

        response = client.get(self.url, {"creator_address": CREATOR_WALLET})

        assert response.status_code == 200
        data = response.json()
        assert [c["id"] for c in data] == [str(cpop.id)]
        assert data[0]["claim_count"] == 1

    def test_other_creators_see_nothing(self, client: Client, cpop: Cpop) -> None:
        response = client.get(self.url, {"creator_address": OTHER_WALLET})

        assert response.status_code == 200
        assert response.json() == []

    def test_creator_address_is_required(self, client: Client) -> None:
        response = client.get(self.url)

        assert response.status_code == 400


class TestGetCpop:
    def test_get(self, client: Client, cpop: Cpop) -> None:
        response = client.get(reverse("api:get_cpop", kwargs={"cpop_id": cpop.id}))

        assert response.status_code == 200
        data = response.json()
        assert data["event_name"] == cpop.event_name
        assert data["claimed"] is None

    def test_claimed_flag(self, client: Client, cpop: Cpop) -> None:
        Claim.objects.create(cpop=cpop, wallet_address=WALLET, status=Claim.ClaimStatus.CLAIMED)
        url = reverse("api:get_cpop", kwargs={"cpop_id": cpop.id})

        assert client.get(url, {"wallet_address": WALLET}).json()["claimed"] is True
        assert client.get(url, {"wallet_address": OTHER_WALLET}).json()["claimed"] is False

    def test_unknown_cpop(self, client: Client) -> None:
        response = client.get(reverse("api:get_cpop", kwargs={"cpop_id": "00000000-0000-0000-0000-000000000000"}))

        assert response.status_code == 404


class TestTreeSizes:
    url = reverse("api:list_tree_sizes")

    def test_without_amount(self, client: Client) -> None:
        response = client.get(self.url)

        assert response.status_code == 200
        data = response.json()
        assert len(data["options"]) == 7
        assert data["recommended"] is None

    def test_recommendation(self, client: Client) -> None:
        response = client.get(self.url, {"amount": 20_000})

        assert response.json()["recommended"]["leaves"] == 65_536

    @pytest.mark.parametrize("amount", [0, -5])
    def test_amount_must_be_positive(self, client: Client, amount: int) -> None:
        response = client.get(self.url, {"amount": amount})

        assert response.status_code == 400


class TestUploadMetadata:
    url = reverse("api:upload_metadata")

    def test_upload(self, client: Client, token_issuer: MagicMock) -> None:
        metadata = {"name": "Breakpoint", "symbol": "BP", "image": "https://example.com/bp.png"}

        response = client.post(self.url, data=orjson.dumps({"metadata": metadata}), content_type="application/json")

        assert response.status_code == 200
        assert response.json() == {"uri": "https://arweave.net/uploaded.json"}
        token_issuer.upload_metadata.assert_called_once_with(metadata)

    def test_empty_metadata(self, client: Client, token_issuer: MagicMock) -> None:
        response = client.post(self.url, data=orjson.dumps({"metadata": {}}), content_type="application/json")

        assert response.status_code == 400
        token_issuer.upload_metadata.assert_not_called()

    def test_minting_service_failure(self, client: Client, token_issuer: MagicMock) -> None:
        token_issuer.upload_metadata.side_effect = MintingError("down")

        response = client.post(
            self.url, data=orjson.dumps({"metadata": {"name": "x"}}), content_type="application/json"
        )

        assert response.status_code == 502


class TestCheckEligibility:
    def url(self, cpop: Cpop) -> str:
        return reverse("api:check_claim_eligibility", kwargs={"cpop_id": cpop.id})

    def test_in_range(self, client: Client, cpop: Cpop, token_issuer: MagicMock) -> None:
        response = client.get(self.url(cpop), {"lat": TOKYO_LAT, "lng": TOKYO_LNG, "wallet_address": WALLET})

        assert response.status_code == 200
        data = response.json()
        assert data["allowed"] is True
        assert data["reason_code"] == "OK"
        assert data["claimed"] is False
        assert data["event_id"] == str(cpop.id)
        token_issuer.mint.assert_not_called()

    def test_out_of_range_is_reported_not_raised(self, client: Client, cpop: Cpop, token_issuer: MagicMock) -> None:
        response = client.get(self.url(cpop), {"lat": TOKYO_FAR_LAT, "lng": TOKYO_FAR_LNG})

        assert response.status_code == 200
        data = response.json()
        assert data["allowed"] is False
        assert data["reason_code"] == "OUT_OF_RANGE"
        assert data["distance_meters"] > 1000
        assert data["claimed"] is None

    def test_location_required(self, client: Client, cpop: Cpop, token_issuer: MagicMock) -> None:
        response = client.get(self.url(cpop))

        assert response.status_code == 400


class TestClaimGet:
    url = reverse("api:claim_cpop")

    def test_server_signed_claim(self, client: Client, cpop: Cpop, token_issuer: MagicMock) -> None:
        response = client.get(self.url, claim_params(cpop))

        assert response.status_code == 200, response.content
        data = response.json()
        assert data["allowed"] is True
        assert data["reason_code"] == "OK"
        assert data["status"] == "claimed"
        assert data["signature"] == token_issuer.mint.return_value.signature
        assert data["transaction"] is None
        assert Claim.objects.filter(pk=data["claim_id"], wallet_address=WALLET).exists()

    def test_client_signed_claim(self, client: Client, cpop: Cpop, token_issuer: MagicMock, settings: t.Any) -> None:
        settings.CPOP_CLAIM_MODE = "client_signed"

        response = client.get(self.url, claim_params(cpop))

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "prepared"
        assert data["transaction"] == "AQID"
        assert data["signature"] is None

    def test_out_of_range(self, client: Client, cpop: Cpop, token_issuer: MagicMock) -> None:
        response = client.get(self.url, claim_params(cpop, lat=TOKYO_FAR_LAT, lng=TOKYO_FAR_LNG))

        assert response.status_code == 403
        data = response.json()
        assert data["allowed"] is False
        assert data["reason_code"] == "OUT_OF_RANGE"
        assert data["radius_meters"] == 200
        token_issuer.mint.assert_not_called()

    def test_before_window(self, client: Client, cpop: Cpop, token_issuer: MagicMock, now: datetime) -> None:
        cpop.start_date = now + timedelta(hours=1)
        cpop.end_date = now + timedelta(hours=2)
        cpop.save()

        response = client.get(self.url, claim_params(cpop))

        assert response.status_code == 403
        assert response.json()["reason_code"] == "BEFORE_WINDOW"

    def test_after_window(self, client: Client, cpop: Cpop, token_issuer: MagicMock, now: datetime) -> None:
        cpop.start_date = now - timedelta(hours=3)
        cpop.end_date = now - timedelta(hours=2)
        cpop.save()

        response = client.get(self.url, claim_params(cpop))

        assert response.status_code == 403
        assert response.json()["reason_code"] == "AFTER_WINDOW"

    def test_already_claimed(self, client: Client, cpop: Cpop, token_issuer: MagicMock) -> None:
        Claim.objects.create(cpop=cpop, wallet_address=WALLET, status=Claim.ClaimStatus.CLAIMED)

        response = client.get(self.url, claim_params(cpop))

        assert response.status_code == 409
        token_issuer.mint.assert_not_called()

    def test_supply_exhausted(self, client: Client, cpop: Cpop, token_issuer: MagicMock) -> None:
        cpop.amount = 1
        cpop.save()
        Claim.objects.create(cpop=cpop, wallet_address=OTHER_WALLET, status=Claim.ClaimStatus.CLAIMED)

        response = client.get(self.url, claim_params(cpop))

        assert response.status_code == 409

    def test_invalid_wallet(self, client: Client, cpop: Cpop, token_issuer: MagicMock) -> None:
        response = client.get(self.url, claim_params(cpop, wallet_address="0xdeadbeef"))

        assert response.status_code == 400

    def test_missing_location(self, client: Client, cpop: Cpop, token_issuer: MagicMock) -> None:
        response = client.get(self.url, claim_params(cpop, lat=None, lng=None))

        assert response.status_code == 400
        token_issuer.mint.assert_not_called()

    def test_missing_location_when_optional(
        self, client: Client, cpop: Cpop, token_issuer: MagicMock, settings: t.Any
    ) -> None:
        settings.CPOP_REQUIRE_CLAIM_LOCATION = False

        response = client.get(self.url, claim_params(cpop, lat=None, lng=None))

        assert response.status_code == 200
        assert response.json()["distance_meters"] is None

    def test_unknown_cpop(self, client: Client, token_issuer: MagicMock) -> None:
        response = client.get(
            self.url, {"wallet_address": WALLET, "id": "00000000-0000-0000-0000-000000000000", "lat": 0, "lng": 0}
        )

        assert response.status_code == 404

    def test_minting_failure(self, client: Client, cpop: Cpop, token_issuer: MagicMock) -> None:
        token_issuer.mint.side_effect = MintingError("rpc down", status_code=500)

        response = client.get(self.url, claim_params(cpop))

        assert response.status_code == 502
        assert not Claim.objects.exists()

    def test_minting_not_configured(self, client: Client, cpop: Cpop, token_issuer: MagicMock) -> None:
        token_issuer.mint.side_effect = MintingNotConfiguredError("no minting service")

        response = client.get(self.url, claim_params(cpop))

        assert response.status_code == 503

    def test_throttled(self, client: Client, cpop: Cpop, token_issuer: MagicMock) -> None:
        limit = int(ClaimThrottle.rate.split("/")[0])
        params = claim_params(cpop, wallet_address="x")

        statuses = [client.get(self.url, params).status_code for _ in range(limit + 1)]

        assert statuses[:limit] == [400] * limit
        assert statuses[-1] == 429


class TestClaimPost:
    url = reverse("api:claim_cpop_for_wallet")

    @pytest.fixture(autouse=True)
    def api_token(self, settings: t.Any) -> None:
        settings.CPOP_API_TOKEN = "s3cret"

    def post(self, client: Client, payload: dict[str, t.Any], token: str | None = "s3cret") -> t.Any:
        headers = {"HTTP_AUTHORIZATION": f"Bearer {token}"} if token else {}
        return client.post(self.url, data=orjson.dumps(payload), content_type="application/json", **headers)

    def test_claim(self, client: Client, cpop: Cpop, token_issuer: MagicMock) -> None:
        payload = {"cpop_id": str(cpop.id), "wallet_address": WALLET, "latitude": TOKYO_LAT, "longitude": TOKYO_LNG}

        response = self.post(client, payload)

        assert response.status_code == 200, response.content
        assert response.json()["status"] == "claimed"
        token_issuer.mint.assert_called_once()

    def test_goes_through_the_gate(self, client: Client, cpop: Cpop, token_issuer: MagicMock) -> None:
        payload = {
            "cpop_id": str(cpop.id),
            "wallet_address": WALLET,
            "latitude": TOKYO_FAR_LAT,
            "longitude": TOKYO_FAR_LNG,
        }

        response = self.post(client, payload)

        assert response.status_code == 403
        token_issuer.mint.assert_not_called()

    @pytest.mark.parametrize("token", [None, "wrong"])
    def test_requires_the_api_token(
        self, client: Client, cpop: Cpop, token_issuer: MagicMock, token: str | None
    ) -> None:
        payload = {"cpop_id": str(cpop.id), "wallet_address": WALLET, "latitude": TOKYO_LAT, "longitude": TOKYO_LNG}

        response = self.post(client, payload, token=token)

        assert response.status_code == 401
        assert not Claim.objects.exists()

    def test_rejected_when_no_token_is_configured(
        self, client: Client, cpop: Cpop, token_issuer: MagicMock, settings: t.Any
    ) -> None:
        settings.CPOP_API_TOKEN = ""
        payload = {"cpop_id": str(cpop.id), "wallet_address": WALLET, "latitude": TOKYO_LAT, "longitude": TOKYO_LNG}

        response = self.post(client, payload, token="anything")

        assert response.status_code == 401


class TestConfirmClaim:
    url = reverse("api:confirm_claim")

    @pytest.fixture(autouse=True)
    def client_signed(self, settings: t.Any) -> None:
        settings.CPOP_CLAIM_MODE = "client_signed"

    def confirm(self, client: Client, cpop: Cpop, **overrides: t.Any) -> t.Any:
        payload = {"cpop_id": str(cpop.id), "wallet_address": WALLET, "signature": SIGNATURE, **overrides}
        return client.post(self.url, data=orjson.dumps(payload), content_type="application/json")

    def test_confirm(self, client: Client, cpop: Cpop, token_issuer: MagicMock) -> None:
        claim_id = client.get(reverse("api:claim_cpop"), claim_params(cpop)).json()["claim_id"]

        response = self.confirm(client, cpop)

        assert response.status_code == 200, response.content
        assert response.json() == {"claim_id": claim_id, "status": "claimed", "signature": SIGNATURE}
        assert Claim.objects.get(pk=claim_id).status == Claim.ClaimStatus.CLAIMED

    def test_already_confirmed(self, client: Client, cpop: Cpop, token_issuer: MagicMock) -> None:
        client.get(reverse("api:claim_cpop"), claim_params(cpop))
        self.confirm(client, cpop)

        assert self.confirm(client, cpop).status_code == 409

    def test_unknown_claim(self, client: Client, cpop: Cpop) -> None:
        assert self.confirm(client, cpop).status_code == 404

    def test_invalid_signature(self, client: Client, cpop: Cpop, token_issuer: MagicMock) -> None:
        client.get(reverse("api:claim_cpop"), claim_params(cpop))

        assert self.confirm(client, cpop, signature="not-a-signature").status_code == 400

    def test_reclaim_after_prepared_claim_expires(
        self, client: Client, cpop: Cpop, token_issuer: MagicMock, settings: t.Any
    ) -> None:
        url = reverse("api:claim_cpop")
        first = client.get(url, claim_params(cpop)).json()["claim_id"]
        stale = timezone.now() - timedelta(seconds=settings.CPOP_PREPARED_CLAIM_TTL_SECONDS + 1)
        Claim.objects.filter(pk=first).update(updated_at=stale)

        response = client.get(url, claim_params(cpop))

        assert response.status_code == 200, response.content
        assert response.json()["status"] == "prepared"
        assert response.json()["claim_id"] != first
