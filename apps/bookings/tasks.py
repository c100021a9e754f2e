"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from . import services

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (scheduled through Celery Beat)
# ============================================================================

@shared_task(name="bookings.complete_finished_bookings")
def complete_finished_bookings() -> dict[str, int]:
    """
    Close stays whose check-out date has passed.

    CONFIRMED bookings ending before today become COMPLETED.
    Runs daily.

    Returns:
        dict: {"completed": number of bookings updated}
    """
    completed_count = services.complete_finished_bookings()
    if completed_count > 0:
        logger.info("Completed %d finished bookings", completed_count)
    return {"completed": completed_count}
