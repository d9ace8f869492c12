# =============================================================================
# core/models/tools.py - SQL, Schema and Vapi Request Schemas
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field


class SqlRequest(BaseModel):
    """Body of POST /sql."""
    query: str | None = None
    token: str | None = None
    project_ref: str | None = Field(default=None, alias="projectRef")

    model_config = ConfigDict(populate_by_name=True)


class VerifySchemaRequest(BaseModel):
    """Body of POST /verify-schema."""
    project_ref: str | None = Field(default=None, alias="projectRef")

    model_config = ConfigDict(populate_by_name=True)


class ValidateVapiKeyRequest(BaseModel):
    """Body of POST /validate-vapi-key."""
    api_key: str | None = Field(default=None, alias="apiKey")

    model_config = ConfigDict(populate_by_name=True)
