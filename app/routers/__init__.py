# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - agents.py: Agent CRUD
# - bots.py: Bot registration/deletion, Telegram send and webhook
# - messages.py: Message deletion, mark-viewed, unseen list, stats
# - contacts.py: Recent contacts
# - ai.py: Chat, sentiment and embedding relays
# - sql.py: SQL passthrough to the Management API
# - schema.py: Schema verification of a user project
# - vapi.py: Vapi key validation
#
# Each router is mounted in main.py under settings.API_PREFIX.
# =============================================================================

from . import health
from . import agents
from . import bots
from . import messages
from . import contacts
from . import ai
from . import sql
from . import schema
from . import vapi

__all__ = [
    "health",
    "agents",
    "bots",
    "messages",
    "contacts",
    "ai",
    "sql",
    "schema",
    "vapi",
]
