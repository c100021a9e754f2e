"""Domain services for legal documents and property resources."""

from __future__ import annotations

import csv
import io
import logging
import os
import zipfile
from contextlib import contextmanager
from datetime import date
from typing import Any, Iterable, Mapping

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.db.models import Max  # type: ignore
from django.utils import timezone  # type: ignore

from apps.audit.services import diff_fields, log_action
from shared.domain.base import DomainError
from shared.infrastructure.uploads import validate_upload

from .models import LegalDocument, LegalDocumentVersion, Resource

logger = logging.getLogger(__name__)

LEGAL_DOCUMENT_TYPES = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
    }
)
RESOURCE_TYPES = LEGAL_DOCUMENT_TYPES | {"video/mp4", "video/quicktime", "video/webm"}

INITIAL_VERSION_COMMENT = "Initial version"


class VersionNotFound(DomainError):
    default_message = "Version not found"


def validate_legal_upload(upload) -> str:
    """Check a legal document upload and return its MIME type."""
    return validate_upload(upload, LEGAL_DOCUMENT_TYPES, settings.LEGAL_DOCUMENT_MAX_UPLOAD_SIZE)


def refresh_document_status(document: LegalDocument, today: date | None = None, *, save: bool = True) -> bool:
    """Align the status with the expiry date. Returns True when the status changed.

    Archived documents and documents without an expiry date are left alone.
    """
    if document.status == LegalDocument.Status.ARCHIVED or document.expiry_date is None:
        return False

    today = today or timezone.localdate()
    days_left = (document.expiry_date - today).days
    if days_left < 0:
        new_status = LegalDocument.Status.EXPIRED
    elif document.reminder_days and days_left <= document.reminder_days:
        new_status = LegalDocument.Status.PENDING_RENEWAL
    else:
        new_status = LegalDocument.Status.ACTIVE

    if new_status == document.status:
        return False
    document.status = new_status
    if save and document.pk:
        document.save(update_fields=["status", "updated_at"])
    return True


def refresh_all_document_statuses(today: date | None = None) -> int:
    today = today or timezone.localdate()
    changed = 0
    queryset = LegalDocument.objects.exclude(status=LegalDocument.Status.ARCHIVED).exclude(expiry_date=None)
    for document in queryset.iterator():
        if refresh_document_status(document, today):
            changed += 1
    return changed


def _store_file(target, upload, content_type: str) -> None:
    target.file.save(os.path.basename(upload.name), upload, save=False)
    target.file_size = upload.size
    target.mime_type = content_type


@contextmanager
def _discard_on_failure(field_file):
    """Delete a freshly stored file when the block that records it fails."""
    try:
        yield
    except Exception:
        if field_file.name:
            field_file.storage.delete(field_file.name)
        raise


def create_document(data: Mapping[str, Any], upload, user=None) -> LegalDocument:
    """Store the document and its first version."""
    content_type = validate_legal_upload(upload)
    actor = user if getattr(user, "is_authenticated", False) else None

    document = LegalDocument(uploaded_by=actor, **data)
    _store_file(document, upload, content_type)
    with _discard_on_failure(document.file), transaction.atomic():
        refresh_document_status(document, save=False)
        document.save()

        LegalDocumentVersion.objects.create(
            document=document,
            version_number=1,
            file=document.file.name,
            file_size=document.file_size,
            mime_type=document.mime_type,
            comment=INITIAL_VERSION_COMMENT,
            uploaded_by=actor,
        )
        log_action(user, "create_legal_document", document, {**data, "file": document.file.name})
        logger.info("Legal document %s created (%s)", document.pk, document.category)
    return document


@transaction.atomic
def update_document(document: LegalDocument, data: Mapping[str, Any], user=None) -> LegalDocument:
    changes = diff_fields(document, data)
    for field, value in data.items():
        setattr(document, field, value)
    if "status" not in data:
        refresh_document_status(document, save=False)
    document.save()
    log_action(user, "update_legal_document", document, changes)
    return document


def upload_version(document: LegalDocument, upload, comment: str = "", user=None) -> LegalDocumentVersion:
    """Add the next version and make it the document's current file."""
    content_type = validate_legal_upload(upload)
    actor = user if getattr(user, "is_authenticated", False) else None

    version = LegalDocumentVersion(document=document, comment=comment, uploaded_by=actor)
    _store_file(version, upload, content_type)
    with _discard_on_failure(version.file), transaction.atomic():
        list(LegalDocument.objects.select_for_update().filter(pk=document.pk).values_list("pk", flat=True))
        current = document.versions.aggregate(latest=Max("version_number"))["latest"] or 0
        version.version_number = current + 1
        version.save()

        document.file = version.file.name
        document.file_size = version.file_size
        document.mime_type = version.mime_type
        document.save(update_fields=["file", "file_size", "mime_type", "updated_at"])
        log_action(
            user,
            "upload_legal_document_version",
            document,
            {"version_number": version.version_number, "file": version.file.name, "comment": comment},
        )
        logger.info("Legal document %s now at version %d", document.pk, version.version_number)
    return version


def file_for_download(document: LegalDocument, version_number: int | None = None):
    """The stored file of the document, or of one of its versions."""
    if version_number is None:
        return document.file
    version = document.versions.filter(version_number=version_number).first()
    if version is None:
        raise VersionNotFound()
    return version.file


def _delete_files(storage, names) -> None:
    for name in names:
        if name:
            storage.delete(name)


@transaction.atomic
def delete_document(document: LegalDocument, user=None) -> None:
    names = {document.file.name, *document.versions.values_list("file", flat=True)}
    storage = document.file.storage
    snapshot = {"name": document.name, "category": document.category}
    document_id = document.pk
    document.delete()
    transaction.on_commit(lambda: _delete_files(storage, names))
    log_action(user, "delete_legal_document", changes=snapshot, entity_type="LegalDocument", entity_id=document_id)


# ---------------------------------------------------------------------------
# Bulk operations
# ---------------------------------------------------------------------------

DOCUMENT_EXPORT_COLUMNS = (
    "id",
    "name",
    "description",
    "category",
    "subcategory",
    "status",
    "propertyName",
    "expiryDate",
    "uploadedBy",
    "uploadedAt",
    "fileSize",
    "tags",
)
FILE_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")
ARCHIVE_DEFAULT_FOLDER = "General"


class NoDocumentsFound(DomainError):
    default_message = "No documents found"


@transaction.atomic
def bulk_delete_documents(ids: Iterable[int], user=None) -> int:
    """Delete the listed documents with their versions. Unknown ids are ignored."""
    documents = list(LegalDocument.objects.filter(pk__in=list(ids)))
    if not documents:
        return 0
    found = [document.pk for document in documents]
    storage = documents[0].file.storage
    names = {document.file.name for document in documents}
    names.update(LegalDocumentVersion.objects.filter(document_id__in=found).values_list("file", flat=True))

    LegalDocument.objects.filter(pk__in=found).delete()
    transaction.on_commit(lambda: _delete_files(storage, names))
    log_action(
        user,
        "bulk_delete_legal_documents",
        changes={"ids": found, "count": len(found)},
        entity_type="LegalDocument",
        entity_id="bulk",
    )
    logger.info("Bulk deleted %d legal documents", len(found))
    return len(found)


def format_file_size(size: int) -> str:
    """Human readable size with up to two decimals, e.g. ``1.5 MB``."""
    if not size:
        return "0 Bytes"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(FILE_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    amount = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{amount} {FILE_SIZE_UNITS[unit]}"


def documents_export_filename(extension: str = "csv", today: date | None = None) -> str:
    today = today or timezone.localdate()
    return f"legal_documents_export_{today.isoformat()}.{extension}"


def export_documents(queryset, user=None) -> list[dict[str, Any]]:
    """One flat record per document, in the order of the queryset."""
    documents = list(queryset.select_related("property", "uploaded_by"))
    rows = [
        {
            "id": document.pk,
            "name": document.name,
            "description": document.description,
            "category": document.category,
            "subcategory": document.subcategory,
            "status": document.status,
            "propertyName": document.property.name if document.property else "",
            "expiryDate": document.expiry_date.isoformat() if document.expiry_date else "",
            "uploadedBy": document.uploaded_by.email if document.uploaded_by else "",
            "uploadedAt": document.uploaded_at.isoformat(),
            "fileSize": format_file_size(document.file_size),
            "tags": ", ".join(str(tag) for tag in document.tags or []),
        }
        for document in documents
    ]
    log_action(
        user,
        "export_legal_documents",
        changes={"count": len(rows)},
        entity_type="LegalDocument",
        entity_id="bulk_export",
    )
    logger.info("Exported %d legal documents", len(rows))
    return rows


def documents_csv(rows: Iterable[Mapping[str, Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(DOCUMENT_EXPORT_COLUMNS)
    for row in rows:
        writer.writerow([row[column] for column in DOCUMENT_EXPORT_COLUMNS])
    return buffer.getvalue()


def archive_filename(now=None) -> str:
    now = now or timezone.now()
    return f"legal-documents-{now.strftime('%Y-%m-%dT%H-%M-%S')}.zip"


def _unique_entry(name: str, used: set[str]) -> str:
    stem, ext = os.path.splitext(name)
    candidate = name
    counter = 2
    while candidate in used:
        candidate = f"{stem} ({counter}){ext}"
        counter += 1
    used.add(candidate)
    return candidate


def _archive_entries(document: LegalDocument, include_versions: bool):
    folder = document.property.name if document.property else ARCHIVE_DEFAULT_FOLDER
    ext = os.path.splitext(document.file.name)[1]
    yield f"{folder}/{document.name}{ext}", document.file
    if include_versions:
        for version in document.versions.order_by("-version_number"):
            version_ext = os.path.splitext(version.file.name)[1]
            yield f"{folder}/versions/{document.name}-v{version.version_number}{version_ext}", version.file


def build_documents_archive(ids: Iterable[int], include_versions: bool = False, user=None) -> io.BytesIO:
    """Zip the files of the listed documents, grouped in one folder per property.

    Files missing from storage are left out of the archive.
    """
    documents = list(
        LegalDocument.objects.filter(pk__in=list(ids)).select_related("property").order_by("name", "id")
    )
    if not documents:
        raise NoDocumentsFound()

    buffer = io.BytesIO()
    used: set[str] = set()
    added = 0
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for document in documents:
            for entry, stored in _archive_entries(document, include_versions):
                if not stored or not stored.storage.exists(stored.name):
                    logger.warning("Legal document %s: file %s missing from storage", document.pk, stored.name)
                    continue
                with stored.storage.open(stored.name, "rb") as handle:
                    archive.writestr(_unique_entry(entry, used), handle.read())
                added += 1
    buffer.seek(0)

    log_action(
        user,
        "bulk_download_legal_documents",
        changes={"ids": [document.pk for document in documents], "files": added},
        entity_type="LegalDocument",
        entity_id="bulk_download",
    )
    return buffer


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


@transaction.atomic
def save_resource(resource: Resource, data: Mapping[str, Any], upload=None, user=None) -> Resource:
    """Create or update a resource; an upload replaces the stored file."""
    created = resource.pk is None
    changes = diff_fields(resource, data)
    for field, value in data.items():
        setattr(resource, field, value)
    previous = resource.file.name if resource.file else None
    if upload is not None:
        validate_upload(upload, RESOURCE_TYPES, settings.LEGAL_DOCUMENT_MAX_UPLOAD_SIZE)
        resource.file.save(os.path.basename(upload.name), upload, save=False)
        changes["file"] = resource.file.name
    if created and getattr(user, "is_authenticated", False):
        resource.uploaded_by = user
    resource.save()
    if previous and upload is not None and previous != resource.file.name:
        storage = resource.file.storage
        transaction.on_commit(lambda: storage.delete(previous))
    log_action(user, "create_resource" if created else "update_resource", resource, changes)
    return resource


@transaction.atomic
def delete_resource(resource: Resource, user=None) -> None:
    name = resource.file.name if resource.file else None
    storage = resource.file.storage
    snapshot = {"name": resource.name, "type": resource.type, "property": resource.property_id}
    resource_id = resource.pk
    resource.delete()
    if name:
        transaction.on_commit(lambda: storage.delete(name))
    log_action(user, "delete_resource", changes=snapshot, entity_type="Resource", entity_id=resource_id)
