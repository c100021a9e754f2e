"""Property domain services."""

from __future__ import annotations

import logging

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore

from apps.audit.services import log_action
from shared.infrastructure.uploads import validate_upload

from .models import Destination, Property

logger = logging.getLogger(__name__)

DESTINATION_IMAGE_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/webp"})


@transaction.atomic
def upload_destination_image(destination: Destination, upload, alt_text: str = "", *, user=None) -> Destination:
    """Store a new destination image, replacing and deleting the previous one."""
    validate_upload(
        upload,
        DESTINATION_IMAGE_TYPES,
        settings.DESTINATION_IMAGE_MAX_UPLOAD_SIZE,
        label="Image",
    )
    previous = destination.image.name if destination.image else None
    destination.image.save(upload.name, upload, save=False)
    destination.image_alt_text = alt_text or destination.image_alt_text or destination.name
    destination.save(update_fields=["image", "image_alt_text", "updated_at"])
    if previous and previous != destination.image.name:
        destination.image.storage.delete(previous)
    logger.info("Destination %s image replaced", destination.pk)
    log_action(user, "upload_destination_image", destination, {"image": destination.image.name})
    return destination


@transaction.atomic
def remove_destination_image(destination: Destination, *, user=None) -> Destination:
    if destination.image:
        destination.image.delete(save=False)
    destination.image = None
    destination.image_alt_text = ""
    destination.save(update_fields=["image", "image_alt_text", "updated_at"])
    log_action(user, "remove_destination_image", destination)
    return destination


def find_property_by_name(name: str) -> Property | None:
    """Case-insensitive exact match on the property name."""
    return Property.objects.by_name(name)
