"""Celery tasks for cPOPs."""

import typing as t
from uuid import UUID

import requests
import structlog
from celery import shared_task
from django.conf import settings

if t.TYPE_CHECKING:
    from cpops.models import Cpop

logger = structlog.get_logger(__name__)

MAP_WEBHOOK_TIMEOUT = 10


def build_map_payload(cpop: "Cpop") -> dict[str, object]:
    """Shape a cPOP the way the map service expects it."""
    return {
        "lat": cpop.latitude,
        "lng": cpop.longitude,
        "image": cpop.image_url,
        "token_value": {
            "id": str(cpop.id),
            "title": cpop.event_name,
            "sub_title": cpop.organizer_name,
            "description": cpop.description,
            "location": cpop.location,
        },
    }


@shared_task(
    name="cpops.publish_cpop_to_map",
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(requests.RequestException,),
    retry_backoff=True,
)
def publish_cpop_to_map(self: object, cpop_id: str) -> bool:
    """Push a newly created cPOP to the public map.

    Args:
        self: Celery task instance (bound task).
        cpop_id: The UUID of the cPOP.

    Returns:
        True if the map accepted the cPOP, False if publishing was skipped.
    """
    from cpops.models import Cpop

    url = settings.CPOP_MAP_WEBHOOK_URL
    if not url:
        logger.debug("map_publish_skipped_unconfigured", cpop_id=cpop_id)
        return False

    cpop = Cpop.objects.filter(pk=UUID(cpop_id)).first()
    if cpop is None:
        logger.warning("map_publish_skipped_missing_cpop", cpop_id=cpop_id)
        return False

    response = requests.post(url, json=build_map_payload(cpop), timeout=MAP_WEBHOOK_TIMEOUT)
    response.raise_for_status()
    logger.info("cpop_published_to_map", cpop_id=cpop_id, status_code=response.status_code)
    return True
