# =============================================================================
# app/routers/messages.py - Message Maintenance Endpoints
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Query

from app.dependencies import TenantDep
from core.models.message import MarkViewedRequest
from core.services.message_service import MessageService

router = APIRouter()


@router.delete("")
async def delete_messages(
    tenant: TenantDep,
    ids: Annotated[str | None, Query(description="Comma-separated message ids")] = None,
    contact_id: Annotated[str | None, Query(alias="contactId")] = None,
):
    """
    Delete messages by id, or all messages of a contact.

    Example: DELETE /messages?ids=a,b or DELETE /messages?contactId=c
    """
    message_ids = [i.strip() for i in ids.split(",") if i.strip()] if ids else None
    return MessageService.delete_messages(tenant.client, message_ids, contact_id)


@router.post("/mark-viewed")
async def mark_viewed(body: MarkViewedRequest, tenant: TenantDep):
    return MessageService.mark_viewed(tenant.client, body.message_ids, body.contact_id)


@router.get("/unseen")
async def list_unseen(tenant: TenantDep):
    """Customer messages not yet viewed, newest first."""
    return MessageService.list_unseen(tenant.client)


@router.get("/view-status")
async def view_status(
    tenant: TenantDep,
    contact_id: Annotated[str | None, Query(alias="contactId")] = None,
):
    """Unviewed customer messages of one contact."""
    return MessageService.view_status(tenant.client, contact_id)


@router.get("/stats")
async def message_stats(tenant: TenantDep):
    return MessageService.stats(tenant.client)
