# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .tenant_service import ResolvedClient, TenantService
from .credential_service import CredentialService
from .agent_service import AgentService
from .bot_registry_service import BotRegistryService
from .bot_service import BotService
from .contact_service import ContactService
from .message_service import MessageService
from .webhook_service import WebhookService

__all__ = [
    "ResolvedClient",
    "TenantService",
    "CredentialService",
    "AgentService",
    "BotRegistryService",
    "BotService",
    "ContactService",
    "MessageService",
    "WebhookService",
]
