"""
This conftest.py provides fixtures shared by all app tests.
"""

import typing as t
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
from django.apps import apps
from django.core.cache import cache
from django.test.client import Client
from django.utils import timezone
from pytest import MonkeyPatch

from cpops.minting import MintReceipt, PreparedMint, TokenIssuer
from cpops.models import Cpop
from cpops.tests.constants import CREATOR_WALLET, TOKYO_LAT, TOKYO_LNG


@pytest.fixture(autouse=True)
def clear_cache() -> t.Iterator[None]:
    """Reset throttle counters between tests."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def enable_celery_eager_mode(settings: t.Any) -> None:
    """Enable Celery eager mode for tests so tasks execute synchronously."""
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True


@pytest.fixture(autouse=True)
def no_map_webhook(settings: t.Any) -> None:
    """Keep map publishing off unless a test turns it on."""
    settings.CPOP_MAP_WEBHOOK_URL = ""


@pytest.fixture
def now() -> datetime:
    return timezone.now()


@pytest.fixture
def cpop(now: datetime) -> Cpop:
    """A live cPOP in Tokyo with a 200m radius and room for 10 claims."""
    return Cpop.objects.create(
        event_name="Solana Tokyo Meetup",
        organizer_name="Superteam Japan",
        description="Evening meetup",
        website="https://example.com",
        location="Shibuya Crossing, Tokyo",
        start_date=now - timedelta(hours=1),
        end_date=now + timedelta(hours=1),
        amount=10,
        image_url="https://example.com/image.png",
        latitude=TOKYO_LAT,
        longitude=TOKYO_LNG,
        claim_radius_meters=200,
        creator_address=CREATOR_WALLET,
        token_address="CoLLxkZRaVvG5dH3UhSVdAJ1qmQ9EXuvxLfqUBGkEH4f",
        token_id="TreeP4nVQVGyeMkZL4BLQ2wRsAQzKHjn1Z3tK9uVbE8",
        token_uri="https://arweave.net/metadata.json",
        token_metadata={"name": "Tokyo cPOP", "symbol": "TKY"},
    )


@pytest.fixture
def token_issuer(monkeypatch: MonkeyPatch) -> MagicMock:
    """Replace the app's token issuer with a mock that always succeeds."""
    issuer = MagicMock(spec=TokenIssuer)
    issuer.mint.return_value = MintReceipt(signature="5sig" + "x" * 60)
    issuer.prepare_mint.return_value = PreparedMint(transaction="AQID")
    issuer.upload_metadata.return_value = "https://arweave.net/uploaded.json"
    monkeypatch.setattr(apps.get_app_config("cpops"), "token_issuer", issuer)
    return issuer


@pytest.fixture
def client() -> Client:
    return Client()
