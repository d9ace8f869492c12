# =============================================================================
# core/models/agent.py - Agent Schemas
# =============================================================================
# Agents are plain rows (id, name, description) in the tenant `agents` table.
# =============================================================================

from pydantic import BaseModel


class AgentCreate(BaseModel):
    """Body of POST /agents."""
    name: str | None = None
    description: str | None = None


class AgentUpdate(BaseModel):
    """Body of PUT /agents."""
    id: str | None = None
    name: str | None = None
    description: str | None = None
