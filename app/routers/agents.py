# =============================================================================
# app/routers/agents.py - Agent CRUD Endpoints
# =============================================================================
# Forwards to the `agents` table of the project resolved for the request.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Query

from app.dependencies import TenantDep
from core.models.agent import AgentCreate, AgentUpdate
from core.services.agent_service import AgentService

router = APIRouter()


@router.get("")
async def list_agents(
    tenant: TenantDep,
    agent_id: Annotated[str | None, Query(alias="id", description="Only this agent")] = None,
):
    """List agents, or fetch one by id."""
    agents = AgentService.list_agents(tenant.client, agent_id)
    return {"success": True, "data": agents}


@router.post("")
async def create_agent(body: AgentCreate, tenant: TenantDep):
    """Create an agent."""
    agent = AgentService.create_agent(tenant.client, body.name, body.description)
    return {"success": True, "data": agent}


@router.put("")
async def update_agent(body: AgentUpdate, tenant: TenantDep):
    """
    Update an agent's name and description.

    Returns 404 when no agent has the given id.
    """
    agent = AgentService.update_agent(tenant.client, body.id, body.name, body.description)
    return {"success": True, "data": agent}


@router.delete("")
async def delete_agent(
    tenant: TenantDep,
    agent_id: Annotated[str | None, Query(alias="id")] = None,
):
    """Delete an agent by id."""
    AgentService.delete_agent(tenant.client, agent_id)
    return {"success": True}
