# =============================================================================
# app/routers/bots.py - Bot Endpoints
# =============================================================================
# Bot listing/registration/deletion, outbound Telegram messages and the
# inbound Telegram webhook.
#
# The webhook is called by Telegram, not the dashboard: it carries no
# cookies and must always answer 200 so Telegram does not retry.
# =============================================================================

import hmac
import logging
from typing import Annotated, Literal
from urllib.parse import unquote

from fastapi import APIRouter, Header, Query, Request
from fastapi.responses import PlainTextResponse

from app.config import settings
from app.dependencies import AdminModeDep, TenantDep
from core.models.bot import (
    DeleteBotRequest,
    SimpleRegisterRequest,
    TelegramRegisterRequest,
    TelegramSendRequest,
)
from core.models.message import WebhookResult
from core.services.bot_service import BotService
from core.services.message_service import MessageService
from core.services.tenant_service import TenantService
from core.services.webhook_service import WebhookService

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Listing
# =============================================================================

@router.get("/list")
async def list_bots(
    tenant: TenantDep,
    platform: Annotated[str | None, Query(description="Only bots of this platform")] = None,
    active: Annotated[str | None, Query(description="'true' or 'false'")] = None,
):
    """List the bots of the resolved project, tokens masked."""
    return {"bots": BotService.list_bots(tenant.client, platform, active)}


@router.get("/list-available")
async def list_available_bots(
    request: Request,
    platform: Annotated[str | None, Query()] = None,
    active: Annotated[str | None, Query()] = None,
    mode: Annotated[Literal["admin", "user"] | None, Query(description="Force the project")] = None,
):
    """
    List bots, optionally forcing the admin or the user project.

    Without `mode` the project is resolved from cookies as usual.
    """
    tenant = TenantService.resolve(
        request.cookies,
        force_admin=mode == "admin",
        force_user=mode == "user",
    )
    return {"bots": BotService.list_bots(tenant.client, platform, active)}


# =============================================================================
# Registration / Deletion
# =============================================================================

@router.post("/simple-register")
async def simple_register(body: SimpleRegisterRequest, request: Request, is_admin_mode: AdminModeDep):
    """
    Create or update a bot, point its webhook here and add it to the registry.
    """
    return BotService.simple_register(
        request.cookies,
        body.token,
        body.name,
        body.platform,
        is_admin_mode,
    )


@router.delete("/delete")
async def delete_bot(body: DeleteBotRequest, tenant: TenantDep, is_admin_mode: AdminModeDep):
    """Delete a bot from its project and from the bot registry."""
    return BotService.delete_bot(tenant.client, body.token, is_admin_mode)


# =============================================================================
# Telegram
# =============================================================================

@router.post("/telegram/register")
async def register_telegram_bot(body: TelegramRegisterRequest, request: Request, is_admin_mode: AdminModeDep):
    """Register a Telegram bot and verify its webhook."""
    return BotService.register_telegram(request.cookies, body.token, body.name, is_admin_mode)


@router.post("/telegram/send")
async def send_telegram_message(body: TelegramSendRequest, tenant: TenantDep):
    """Send a message to a contact through the first working Telegram bot."""
    return MessageService.send_telegram_message(
        tenant.client,
        body.contact_id,
        body.content,
        requested_message_id=body.message_id,
    )


@router.post("/telegram/webhook/{token}")
async def telegram_webhook(
    token: str,
    request: Request,
    secret_token: Annotated[str | None, Header(alias="X-Telegram-Bot-Api-Secret-Token")] = None,
):
    """
    Receive an update from Telegram.

    Always 200; failures are reported in the body only.
    """
    bot_token = unquote(token)

    expected = settings.TELEGRAM_WEBHOOK_SECRET
    if expected and not hmac.compare_digest((secret_token or "").encode(), expected.encode()):
        logger.warning("Rejected webhook with invalid secret token")
        return WebhookResult(success=False, error="Invalid webhook secret").to_dict()

    try:
        update = await request.json()
    except ValueError as e:
        logger.error(f"Unparsable webhook body: {e}")
        return WebhookResult(success=False, error="Invalid JSON body").to_dict()

    if not isinstance(update, dict):
        return WebhookResult(success=False, error="Invalid update").to_dict()

    try:
        result = WebhookService.handle_telegram_update(bot_token, update)
    except Exception as e:
        logger.exception(f"Unexpected webhook error: {e}")
        result = WebhookResult(success=False, error=str(e))
    return result.to_dict()


@router.get("/telegram/webhook/{token}", response_class=PlainTextResponse)
async def telegram_webhook_status(token: str):
    """Plain-text probe used when checking a webhook URL in a browser."""
    return "Telegram Webhook is active and working"
