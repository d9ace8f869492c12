# =============================================================================
# core/services/agent_service.py - Agent CRUD
# =============================================================================
# Agents are forwarded verbatim to the tenant `agents` table.
# =============================================================================

import logging
from typing import Any

from supabase import Client

from app.exceptions import MissingFieldError, NotFoundError, UpstreamServiceError
from lib.supabase_client import is_not_found_error

logger = logging.getLogger(__name__)


def _failed(verb: str, error: Exception) -> UpstreamServiceError:
    logger.error(f"Error trying to {verb} agent: {error}")
    return UpstreamServiceError(f"Failed to {verb} agent", service="supabase", error=str(error))


class AgentService:
    """Service for agent CRUD against the resolved tenant client."""

    @staticmethod
    def list_agents(client: Client, agent_id: str | None = None) -> list[dict[str, Any]]:
        """All agents, or the one with `agent_id`."""
        try:
            query = client.table("agents").select("*")
            if agent_id:
                query = query.eq("id", agent_id)
            response = query.execute()
        except Exception as e:
            raise _failed("fetch", e)
        return response.data or []

    @staticmethod
    def create_agent(client: Client, name: str | None, description: str | None = None) -> dict[str, Any]:
        if not name:
            raise MissingFieldError("Agent name is required", ["name"])

        try:
            response = client.table("agents").insert({
                "name": name,
                "description": description,
            }).execute()
        except Exception as e:
            raise _failed("create", e)

        agent = response.data[0]
        logger.info(f"Created agent: {agent.get('id')}")
        return agent

    @staticmethod
    def update_agent(
        client: Client,
        agent_id: str | None,
        name: str | None,
        description: str | None = None,
    ) -> dict[str, Any]:
        """
        Update an agent's name and description.

        Raises:
            MissingFieldError: id or name missing (400)
            NotFoundError: No agent with that id (404)
            UpstreamServiceError: The update failed (500)
        """
        if not agent_id or not name:
            raise MissingFieldError("Agent ID and name are required", ["id", "name"])

        try:
            existing = (
                client.table("agents")
                .select("id")
                .eq("id", agent_id)
                .single()
                .execute()
            )
        except Exception as e:
            if not is_not_found_error(e):
                logger.error(f"Error checking agent {agent_id}: {e}")
            existing = None

        if not existing or not existing.data:
            raise NotFoundError("Agent not found", details={"id": agent_id})

        try:
            response = (
                client.table("agents")
                .update({"name": name, "description": description})
                .eq("id", agent_id)
                .execute()
            )
        except Exception as e:
            raise _failed("update", e)

        return response.data[0] if response.data else {"id": agent_id, "name": name, "description": description}

    @staticmethod
    def delete_agent(client: Client, agent_id: str | None) -> None:
        if not agent_id:
            raise MissingFieldError("Agent ID is required", ["id"])

        try:
            client.table("agents").delete().eq("id", agent_id).execute()
        except Exception as e:
            raise _failed("delete", e)
        logger.info(f"Deleted agent: {agent_id}")
