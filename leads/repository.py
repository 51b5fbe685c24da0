"""
Owner-scoped persistence for leads.

Every function takes the owning user first and never touches another
user's rows. A lead owned by someone else is reported exactly like a lead
that does not exist.
"""
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Q

from leads.exceptions import DuplicateLeadError, LeadNotFoundError, LeadPersistenceError
from leads.models import Lead

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeadPage:
    items: List[Lead]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)


def owned_leads(owner):
    return Lead.objects.filter(owner=owner)


def list_leads(owner, predicate: Q, page: int, limit: int) -> LeadPage:
    """Return one page of the owner's leads matching ``predicate``, newest first."""
    queryset = owned_leads(owner).filter(predicate)
    offset = (page - 1) * limit
    try:
        total = queryset.count()
        items = list(queryset.order_by("-created_at", "-id")[offset:offset + limit])
    except DatabaseError as exc:
        raise LeadPersistenceError("Failed to fetch leads") from exc
    return LeadPage(items=items, total=total, page=page, limit=limit)


def get_lead(owner, lead_id: int) -> Lead:
    try:
        return owned_leads(owner).get(pk=lead_id)
    except Lead.DoesNotExist:
        raise LeadNotFoundError(lead_id)


def create_lead(owner, data: Dict[str, Any]) -> Lead:
    lead = Lead(owner=owner, **data)
    _check_email_available(owner, lead.email)
    _save(lead)
    logger.info("Created lead %s for user %s", lead.pk, owner.pk)
    return lead


def update_lead(owner, lead_id: int, changes: Dict[str, Any]) -> Lead:
    """Apply a partial update. The owner of a lead never changes."""
    changes = {field: value for field, value in changes.items() if field not in ("owner", "owner_id")}
    lead = get_lead(owner, lead_id)

    if "email" in changes:
        email = changes["email"].strip().lower()
        if email != lead.email:
            _check_email_available(owner, email, exclude_id=lead.pk)

    for field, value in changes.items():
        setattr(lead, field, value)
    _save(lead)
    logger.info("Updated lead %s (%s)", lead.pk, ", ".join(sorted(changes)) or "no fields")
    return lead


def delete_lead(owner, lead_id: int) -> Lead:
    """Hard delete. The returned instance keeps its primary key for the response."""
    lead = get_lead(owner, lead_id)
    try:
        deleted, _ = owned_leads(owner).filter(pk=lead.pk).delete()
    except DatabaseError as exc:
        raise LeadPersistenceError("Failed to delete lead") from exc
    if not deleted:
        # Removed by a concurrent request between the lookup and the delete
        raise LeadNotFoundError(lead_id)
    logger.info("Deleted lead %s for user %s", lead.pk, owner.pk)
    return lead


def _check_email_available(owner, email: str, exclude_id=None) -> None:
    queryset = owned_leads(owner).filter(email=email.strip().lower())
    if exclude_id is not None:
        queryset = queryset.exclude(pk=exclude_id)
    if queryset.exists():
        raise DuplicateLeadError(email)


def _save(lead: Lead) -> None:
    try:
        with transaction.atomic():
            lead.save()
    except IntegrityError as exc:
        if owned_leads(lead.owner_id).filter(email=lead.email).exclude(pk=lead.pk).exists():
            raise DuplicateLeadError(lead.email) from exc
        raise LeadPersistenceError("Failed to save lead") from exc
    except DatabaseError as exc:
        raise LeadPersistenceError("Failed to save lead") from exc
