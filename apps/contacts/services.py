"""Domain services for contacts: CRUD, property links, CSV export and bulk import."""

from __future__ import annotations

import csv
import io
import logging
from typing import Any, Iterable, Mapping

from django.db import DatabaseError, transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.audit.models import SensitiveDataAccess
from apps.audit.services import diff_fields, log_action, log_sensitive_access
from apps.properties.models import Property
from apps.properties.services import find_property_by_name
from shared.domain.base import DomainError

from .models import Contact, ContactProperty

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ("firstName", "lastName", "email", "phone", "category", "language", "comments", "linkedProperties")
LINKED_PROPERTIES_SEPARATOR = "; "


class ContactLinkError(DomainError):
    default_message = "Contact is already linked to this property"


class PropertyLinkNotFound(DomainError):
    """A property named in a link could not be resolved."""

    def __init__(self, name: str):
        similar = Property.objects.similar_to(name)
        message = f'Property "{name}" not found.'
        if similar:
            message += f" Similar properties: {', '.join(similar)}"
        super().__init__(message)
        self.name = name


def check_email_unique(email: str, exclude_id=None) -> bool:
    """True when no other contact uses the address (case-insensitive). Empty addresses are always unique."""
    cleaned = (email or "").strip()
    if not cleaned:
        return True
    qs = Contact.objects.filter(email__iexact=cleaned)
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    return not qs.exists()


def _replace_links(contact: Contact, links: Iterable[Mapping[str, Any]]) -> None:
    ContactProperty.objects.filter(contact=contact).delete()
    seen = set()
    for link in links:
        property_obj = link["property"]
        if property_obj.pk in seen:
            continue
        seen.add(property_obj.pk)
        ContactProperty.objects.create(
            contact=contact,
            property=property_obj,
            relationship=link.get("relationship") or ContactProperty.Relationship.OTHER,
        )


@transaction.atomic
def create_contact(data: Mapping[str, Any], links: Iterable[Mapping[str, Any]] = (), user=None) -> Contact:
    contact = Contact.objects.create(**data)
    links = list(links)
    _replace_links(contact, links)
    log_action(
        user,
        "create_contact",
        contact,
        {**data, "properties": [link["property"].pk for link in links]},
    )
    logger.info("Contact %s created", contact.pk)
    return contact


@transaction.atomic
def update_contact(
    contact: Contact,
    data: Mapping[str, Any],
    links: Iterable[Mapping[str, Any]] | None = None,
    user=None,
) -> Contact:
    """Update the fields in ``data``; ``links`` replaces the property links when given."""
    changes = diff_fields(contact, data)
    for field, value in data.items():
        setattr(contact, field, value)
    contact.save()
    if links is not None:
        links = list(links)
        _replace_links(contact, links)
        changes["properties"] = [link["property"].pk for link in links]
    log_action(user, "update_contact", contact, changes)
    return contact


@transaction.atomic
def delete_contact(contact: Contact, user=None) -> None:
    snapshot = {"first_name": contact.first_name, "last_name": contact.last_name, "email": contact.email}
    contact_id = contact.pk
    contact.delete()
    log_action(user, "delete_contact", changes=snapshot, entity_type="Contact", entity_id=contact_id)
    logger.info("Contact %s deleted", contact_id)


@transaction.atomic
def bulk_delete_contacts(ids: Iterable[int], user=None) -> int:
    ids = list(ids)
    found = list(Contact.objects.filter(pk__in=ids).values_list("pk", flat=True))
    Contact.objects.filter(pk__in=found).delete()
    log_action(user, "bulk_delete_contacts", changes={"ids": found}, entity_type="Contact")
    logger.info("Bulk deleted %d contacts", len(found))
    return len(found)


@transaction.atomic
def link_property(contact: Contact, property_obj: Property, relationship: str, user=None) -> ContactProperty:
    if ContactProperty.objects.filter(contact=contact, property=property_obj).exists():
        raise ContactLinkError()
    link = ContactProperty.objects.create(contact=contact, property=property_obj, relationship=relationship)
    log_action(
        user,
        "link_contact_property",
        contact,
        {"property": property_obj.pk, "relationship": relationship},
    )
    return link


@transaction.atomic
def unlink_property(contact: Contact, property_obj: Property, user=None) -> None:
    deleted, _ = ContactProperty.objects.filter(contact=contact, property=property_obj).delete()
    if not deleted:
        raise ContactLinkError("Contact is not linked to this property")
    log_action(user, "unlink_contact_property", contact, {"property": property_obj.pk})


# ---------------------------------------------------------------------------
# CSV export
# ---------------------------------------------------------------------------


def export_filename(today=None) -> str:
    today = today or timezone.localdate()
    return f"contacts_export_{today.isoformat()}.csv"


def export_contacts_csv(queryset, user=None) -> str:
    """Render contacts as CSV with every cell quoted. Exporting is recorded as contact data access."""
    contacts = list(queryset.prefetch_related("property_links__property").order_by("last_name", "first_name", "id"))
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)
    for contact in contacts:
        linked = LINKED_PROPERTIES_SEPARATOR.join(link.property.name for link in contact.property_links.all())
        writer.writerow(
            [
                contact.first_name,
                contact.last_name,
                contact.email,
                contact.phone,
                contact.category,
                contact.language,
                contact.comments,
                linked,
            ]
        )

    log_action(user, "export_contacts", changes={"count": len(contacts)}, entity_type="Contact")
    log_sensitive_access(
        user,
        SensitiveDataAccess.Action.EXPORT,
        SensitiveDataAccess.DataType.CONTACT_DATA,
        metadata={"count": len(contacts)},
    )
    logger.info("Exported %d contacts", len(contacts))
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


def _link_target(entry: Any) -> tuple[str, str]:
    """Accept ``{"name": ..., "relationship": ...}`` or a ``"name:Villa"`` string."""
    if isinstance(entry, Mapping):
        return str(entry.get("name") or "").strip(), entry.get("relationship") or ContactProperty.Relationship.OTHER
    text = str(entry or "").strip()
    if text.lower().startswith("name:"):
        text = text[len("name:"):].strip()
    return text, ContactProperty.Relationship.OTHER


def resolve_property_links(entries: Iterable[Any]) -> tuple[list[dict[str, Any]], list[str]]:
    """Look up linked properties by name. Returns the resolved links and one message per unknown name."""
    links: list[dict[str, Any]] = []
    errors: list[str] = []
    for entry in entries or ():
        name, relationship = _link_target(entry)
        if not name:
            continue
        property_obj = find_property_by_name(name)
        if property_obj is None:
            errors.append(PropertyLinkNotFound(name).message)
            continue
        links.append({"property": property_obj, "relationship": relationship})
    return links, errors


def import_contacts(
    rows: list[Mapping[str, Any]],
    *,
    skip_duplicates: bool = True,
    update_existing: bool = False,
    user=None,
) -> dict[str, Any]:
    """Create contacts from raw rows, matching existing ones on email.

    Each row is validated like a single create. A matching email is
    skipped when ``skip_duplicates`` is set, otherwise updated when
    ``update_existing`` is set, otherwise a new contact is created.
    Unknown linked properties are reported but don't stop the row.
    Rows are numbered from 1.
    """
    from apps.bookings.serializers import flatten_errors

    from .serializers import ContactImportRowSerializer

    result: dict[str, Any] = {"imported": 0, "skipped": 0, "updated": 0, "errors": []}

    for row_number, row in enumerate(rows, start=1):
        serializer = ContactImportRowSerializer(data=row)
        if not serializer.is_valid():
            result["errors"].append({"row": row_number, "error": flatten_errors(serializer.errors)})
            continue
        data = dict(serializer.validated_data)
        link_entries = data.pop("properties", [])

        email = data.get("email", "")
        existing = Contact.objects.filter(email__iexact=email).order_by("id").first() if email else None
        if existing is not None and skip_duplicates:
            result["skipped"] += 1
            continue

        links, link_errors = resolve_property_links(link_entries)
        for message in link_errors:
            result["errors"].append({"row": row_number, "error": message})

        try:
            with transaction.atomic():
                if existing is not None and update_existing:
                    changes = diff_fields(existing, data)
                    for field, value in data.items():
                        setattr(existing, field, value)
                    existing.save()
                    if links:
                        _replace_links(existing, links)
                    log_action(user, "import_update_contact", existing, {**changes, "row": row_number})
                    result["updated"] += 1
                else:
                    contact = Contact.objects.create(**data)
                    _replace_links(contact, links)
                    log_action(user, "import_contact", contact, {**data, "row": row_number})
                    result["imported"] += 1
        except DatabaseError as exc:
            logger.exception("Contact import failed on row %d", row_number)
            result["errors"].append({"row": row_number, "error": str(exc)})

    logger.info(
        "Contact import: %d imported, %d updated, %d skipped, %d errors",
        result["imported"],
        result["updated"],
        result["skipped"],
        len(result["errors"]),
    )
    return result
