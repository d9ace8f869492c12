# =============================================================================
# app/routers/contacts.py - Contact Endpoints
# =============================================================================

from fastapi import APIRouter

from app.dependencies import TenantDep
from core.services.contact_service import ContactService

router = APIRouter()


@router.get("/list")
async def list_contacts(tenant: TenantDep):
    """The ten most recently created contacts."""
    return {"contacts": ContactService.list_recent(tenant.client)}
