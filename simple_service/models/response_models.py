from pydantic import BaseModel, Field

from simple_service.models.common import CamelModel


class HealthResponse(BaseModel):
    """Response model for the health check endpoint."""

    status: str


class ErrorResponse(BaseModel):
    """Error envelope returned with HTTP 500 responses."""

    error: str


class OutboundIpResponse(BaseModel):
    """Response model for the outbound IP endpoint."""

    outboundip: str = Field(examples=["203.0.113.42"])


class InboundIpResponse(BaseModel):
    """Response model for the inbound (caller) IP endpoint."""

    inboundip: str = Field(examples=["198.51.100.7"])


class AzureAdConfigResponse(CamelModel):
    """Azure AD configuration for the SPA client. Contains no secrets."""

    client_id: str = ""
    tenant_id: str = "consumers"
    scopes: list[str] = Field(default_factory=list)


class ClaimsResponse(CamelModel):
    """Claims of the authenticated caller, flattened to string values."""

    is_authenticated: bool
    name: str | None = None
    claims: dict[str, str] = Field(default_factory=dict)
    scopes: list[str] = Field(default_factory=list)
