"""Celery tasks for legal documents."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from . import services

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (scheduled through Celery Beat)
# ============================================================================

@shared_task(name="documents.refresh_legal_document_statuses")
def refresh_legal_document_statuses() -> dict[str, int]:
    """
    Move documents between ACTIVE, PENDING_RENEWAL and EXPIRED.

    Runs daily. Archived documents are never touched.

    Returns:
        dict: {"updated": number of documents whose status changed}
    """
    updated = services.refresh_all_document_statuses()
    if updated > 0:
        logger.info("Refreshed status of %d legal documents", updated)
    return {"updated": updated}
