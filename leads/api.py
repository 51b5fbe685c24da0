import logging

from django.conf import settings
from django.db import models
from ninja import Query, Router

from authentication.jwt_auth import jwt_auth
from leads import repository
from leads.exceptions import DuplicateLeadError, LeadNotFoundError, LeadPersistenceError
from leads.filters import build_filter_query
from leads.models import Lead
from leads.schemas import (
    LeadCreateSchema,
    LeadEnvelopeSchema,
    LeadListResponseSchema,
    LeadUpdateSchema,
)

logger = logging.getLogger(__name__)

router = Router(auth=jwt_auth)

RESERVED_PARAMS = ("page", "limit")

# Plain text columns may be filtered by exact value without dedicated handling
PASSTHROUGH_FIELDS = tuple(
    field.name
    for field in Lead._meta.concrete_fields
    if isinstance(field, models.CharField) and not field.choices
)

NOT_FOUND = {"error": "Lead not found"}
DUPLICATE_EMAIL = {"error": "Email already exists"}


def filters_from_request(request) -> dict:
    """Collapse the query string into a field -> value(s) mapping."""
    filters = {}
    for key, values in request.GET.lists():
        if key in RESERVED_PARAMS:
            continue
        filters[key] = values if len(values) > 1 else values[0]
    return filters


@router.get("/", response={200: LeadListResponseSchema, 500: dict})
def list_leads(
    request,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.LEADS_DEFAULT_PAGE_SIZE, ge=1, le=settings.LEADS_MAX_PAGE_SIZE),
):
    """
    List the caller's leads, newest first.

    Any query parameter other than ``page`` and ``limit`` is a filter; see
    ``leads.filters`` for the ``<field>_operator`` comparison modes.
    """
    predicate = build_filter_query(filters_from_request(request), PASSTHROUGH_FIELDS)
    try:
        result = repository.list_leads(request.auth, predicate, page, limit)
    except LeadPersistenceError:
        logger.exception("Get leads error")
        return 500, {"error": "Failed to fetch leads"}

    return {
        "data": result.items,
        "page": result.page,
        "limit": result.limit,
        "total": result.total,
        "totalPages": result.total_pages,
    }


@router.post("/", response={201: LeadEnvelopeSchema, 400: dict, 500: dict})
def create_lead(request, data: LeadCreateSchema):
    """Create a lead owned by the caller"""
    try:
        lead = repository.create_lead(request.auth, data.model_dump())
    except DuplicateLeadError:
        return 400, DUPLICATE_EMAIL
    except LeadPersistenceError:
        logger.exception("Create lead error")
        return 500, {"error": "Failed to create lead"}

    return 201, {"message": "Lead created successfully", "lead": lead}


@router.get("/{lead_id}", response={200: LeadEnvelopeSchema, 404: dict})
def get_lead(request, lead_id: int):
    try:
        lead = repository.get_lead(request.auth, lead_id)
    except LeadNotFoundError:
        return 404, NOT_FOUND
    return {"lead": lead}


@router.put("/{lead_id}", response={200: LeadEnvelopeSchema, 400: dict, 404: dict, 500: dict})
def update_lead(request, lead_id: int, data: LeadUpdateSchema):
    """Update only the fields present in the body"""
    try:
        lead = repository.update_lead(request.auth, lead_id, data.model_dump(exclude_unset=True))
    except LeadNotFoundError:
        return 404, NOT_FOUND
    except DuplicateLeadError:
        return 400, DUPLICATE_EMAIL
    except LeadPersistenceError:
        logger.exception("Update lead error")
        return 500, {"error": "Failed to update lead"}

    return {"message": "Lead updated successfully", "lead": lead}


@router.delete("/{lead_id}", response={200: LeadEnvelopeSchema, 404: dict, 500: dict})
def delete_lead(request, lead_id: int):
    try:
        lead = repository.delete_lead(request.auth, lead_id)
    except LeadNotFoundError:
        return 404, NOT_FOUND
    except LeadPersistenceError:
        logger.exception("Delete lead error")
        return 500, {"error": "Failed to delete lead"}

    return {"message": "Lead deleted successfully", "lead": lead}
