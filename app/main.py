# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the BladeX API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    BladexException,
    bladex_exception_handler,
    validation_exception_handler,
)
from app.middleware import cookie_sync_middleware
from app.routers import health, agents, bots, messages, contacts, ai, sql, schema, vapi
from app.auth import routes as auth_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Nothing is opened at startup: the admin Supabase client and the OpenAI
    client are created lazily on first use.
    """
    # Startup
    logger.info(f"Starting BladeX API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(f"Telegram webhooks will be delivered to {settings.webhook_base_url}")
    if settings.is_development and not settings.PUBLIC_BASE_URL.startswith("https://"):
        logger.warning("Telegram only calls HTTPS webhooks; set PUBLIC_BASE_URL to a tunnel such as ngrok")
    if not settings.TELEGRAM_WEBHOOK_SECRET:
        logger.warning("TELEGRAM_WEBHOOK_SECRET is not set; webhook requests are not authenticated")

    yield

    # Shutdown
    logger.info("Shutting down BladeX API")


# Create FastAPI application
app = FastAPI(
    title="BladeX API",
    description="""
## Messaging Dashboard Backend

BladeX connects Telegram bots to a Supabase project and relays AI requests.

### Projects

Every request talks to one Supabase project:

| Mode | Project |
|------|---------|
| **ADMIN** | The operator's project (environment variables) |
| **USER** | The visitor's own project (credential cookies or stored credentials) |

### Quick Start

```bash
# 1. Connect a project
curl -X POST http://localhost:8000/api/auth/store-credentials \\
  -H "Content-Type: application/json" -c cookies.txt \\
  -d '{"supabaseUrl": "https://abc.supabase.co", "supabaseAnonKey": "eyJ..."}'

# 2. Register a Telegram bot
curl -X POST http://localhost:8000/api/bots/simple-register -b cookies.txt \\
  -H "Content-Type: application/json" \\
  -d '{"token": "123456:ABC...", "name": "Support", "platform": "telegram"}'

# 3. Reply to a contact
curl -X POST http://localhost:8000/api/bots/telegram/send -b cookies.txt \\
  -H "Content-Type: application/json" \\
  -d '{"contactId": "...", "content": "Hello!"}'
```
""",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Admin login, session tokens and credential cookies",
        },
        {
            "name": "Agents",
            "description": "Agent CRUD",
        },
        {
            "name": "Bots",
            "description": "Bot registration, Telegram sending and webhooks",
        },
        {
            "name": "Messages",
            "description": "Message maintenance and dashboard stats",
        },
        {
            "name": "Contacts",
            "description": "Recent contacts",
        },
        {
            "name": "AI",
            "description": "Chat, sentiment and embedding relays",
        },
        {
            "name": "Tools",
            "description": "SQL passthrough, schema verification and Vapi key checks",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# Sliding expiry for credential and admin cookies
app.middleware("http")(cookie_sync_middleware)

# CORS middleware - allows cross-origin requests. Cookies are the auth
# mechanism, so origins are always explicit.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(BladexException)
async def handle_bladex_exception(request: Request, exc: BladexException):
    """Handle custom BladeX exceptions."""
    return await bladex_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    """Handle request validation errors as 400s."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Admin, session and credential endpoints
app.include_router(
    auth_routes.router,
    prefix=settings.API_PREFIX,
    tags=["Auth"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix=settings.API_PREFIX,
    tags=["Health"]
)

# Agent endpoints
app.include_router(
    agents.router,
    prefix=f"{settings.API_PREFIX}/agents",
    tags=["Agents"]
)

# Bot endpoints (incl. Telegram send and webhook)
app.include_router(
    bots.router,
    prefix=f"{settings.API_PREFIX}/bots",
    tags=["Bots"]
)

# Message endpoints
app.include_router(
    messages.router,
    prefix=f"{settings.API_PREFIX}/messages",
    tags=["Messages"]
)

# Contact endpoints
app.include_router(
    contacts.router,
    prefix=f"{settings.API_PREFIX}/contacts",
    tags=["Contacts"]
)

# AI relay endpoints
app.include_router(
    ai.router,
    prefix=settings.API_PREFIX,
    tags=["AI"]
)

# Tool endpoints
app.include_router(
    sql.router,
    prefix=settings.API_PREFIX,
    tags=["Tools"]
)
app.include_router(
    schema.router,
    prefix=settings.API_PREFIX,
    tags=["Tools"]
)
app.include_router(
    vapi.router,
    prefix=settings.API_PREFIX,
    tags=["Tools"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "BladeX API",
        "version": VERSION,
        "docs": "/docs",
        "health": f"{settings.API_PREFIX}/health",
    }
