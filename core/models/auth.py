# =============================================================================
# core/models/auth.py - Admin, Session and Credential Schemas
# =============================================================================
# Request bodies for the admin/session/credential endpoints and the
# decoded session user carried by the session_token cookie.
#
# The browser client sends camelCase keys; fields use aliases so both
# camelCase and snake_case are accepted.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ClientMode(str, Enum):
    """
    Which Supabase project a request talks to.

    - ADMIN: the operator's project configured via environment variables
    - USER: the visitor's own project (cookies or stored credentials)
    """
    ADMIN = "ADMIN"
    USER = "USER"


class SessionRole(str, Enum):
    """Role claim carried by a session token."""
    USER = "user"
    ADMIN = "admin"


class SessionUser(BaseModel):
    """
    User decoded from a valid session_token cookie.

    Minimal info available from the token itself, without a database query.
    """
    user_id: str
    email: str
    role: str = SessionRole.USER.value

    model_config = ConfigDict(frozen=True)

    @property
    def is_admin(self) -> bool:
        return self.role == SessionRole.ADMIN.value


class AdminLoginRequest(BaseModel):
    """Body of POST /admin/login."""
    email: str | None = None
    password: str | None = None


class CreateSessionRequest(BaseModel):
    """Body of POST /auth/create-session."""
    user_id: str | None = Field(default=None, alias="userId")
    email: str | None = None
    role: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class StoreCredentialsRequest(BaseModel):
    """
    Body of POST /auth/store-credentials.

    Only the project URL and anon key are required; the rest is optional
    metadata from the project picker.
    """
    supabase_url: str | None = Field(default=None, alias="supabaseUrl")
    supabase_anon_key: str | None = Field(default=None, alias="supabaseAnonKey")
    supabase_service_role_key: str | None = Field(default=None, alias="supabaseServiceRoleKey")
    project_ref: str | None = Field(default=None, alias="projectRef")
    project_name: str | None = Field(default=None, alias="projectName")
    access_token: str | None = Field(default=None, alias="accessToken")

    model_config = ConfigDict(populate_by_name=True)


class StoreUserCredentialsRequest(BaseModel):
    """Body of POST /users/store-credentials."""
    email: str | None = None
