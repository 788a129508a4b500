from typing import Annotated, Any

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from simple_service.auth import extract_scopes, flatten_claims, get_claims
from simple_service.clients.base import BaseOutboundIpClient
from simple_service.clients.ipify_client import UNKNOWN_IP, IpifyClient
from simple_service.config import Settings, get_settings
from simple_service.exception_handlers import unhandled_exception_handler
from simple_service.logger import logger
from simple_service.models.response_models import (
    AzureAdConfigResponse,
    ClaimsResponse,
    ErrorResponse,
    HealthResponse,
    InboundIpResponse,
    OutboundIpResponse,
)
from simple_service.services.outbound_ip_service import OutboundIpService

OUTBOUND_IP_ERROR = "An error occurred while retrieving the outbound IP address"
CONFIG_ERROR = "An error occurred while retrieving configuration"
CLAIMS_ERROR = "An error occurred while retrieving user claims"

app_settings = get_settings()

app = FastAPI(
    title="Simple IP Service API",
    version="0.1.0",
    description="A simple service with Azure AD authentication.",
    swagger_ui_init_oauth={
        "clientId": app_settings.azure_ad_client_id,
        "usePkceWithAuthorizationCodeGrant": True,
        "scopes": app_settings.default_scope,
    },
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
logger.info("Started Simple IP Service")


def get_outbound_ip_client(settings: Annotated[Settings, Depends(get_settings)]) -> BaseOutboundIpClient:
    """Dependency to provide the upstream IP provider client."""
    return IpifyClient(url=settings.ipify_url, timeout_seconds=settings.ipify_timeout_seconds)


def get_outbound_ip_service(
    client: Annotated[BaseOutboundIpClient, Depends(get_outbound_ip_client)],
) -> OutboundIpService:
    """Dependency to provide an OutboundIpService wired to the given client."""
    return OutboundIpService(client)


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error=message).model_dump(),
    )


# Register the global exception handler from the shared handlers module.
app.add_exception_handler(Exception, unhandled_exception_handler)


@app.get(
    "/health",
    tags=["health"],
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
)
async def health() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(status="Healthy")


@app.get(
    "/api/ip/outbound",
    response_model=OutboundIpResponse,
    responses={status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse}},
    status_code=status.HTTP_200_OK,
    tags=["ip"],
    summary="Public IP address this server's outbound connections come from.",
)
async def get_outbound_ip(
    request: Request,
    service: Annotated[OutboundIpService, Depends(get_outbound_ip_service)],
) -> OutboundIpResponse | JSONResponse:
    """Resolve the outbound IP through the upstream provider.

    Every failure is reported as the same 500 error body; the cause is only logged.
    """
    logger.info(f"Received request to get outbound IP address path={request.url.path} method={request.method}")
    try:
        ip_address = await service.resolve_outbound_ip()
    except Exception as exc:
        logger.exception(
            "Error occurred while getting outbound IP address "
            f"path={request.url.path} method={request.method} error={exc!r}"
        )
        return _error_response(OUTBOUND_IP_ERROR)

    return OutboundIpResponse(outboundip=ip_address)


@app.get(
    "/api/ip/inbound",
    response_model=InboundIpResponse,
    status_code=status.HTTP_200_OK,
    tags=["ip"],
    summary="IP address the caller's request arrived from.",
)
async def get_inbound_ip(request: Request) -> InboundIpResponse:
    # Behind a proxy this is the proxy's address; X-Forwarded-For is visible via /api/ip/headers.
    client_host = request.client.host if request.client else None
    logger.info(f"Received request to get inbound IP address client_ip={client_host}")
    return InboundIpResponse(inboundip=client_host or UNKNOWN_IP)


@app.get(
    "/api/ip/headers",
    response_model=dict[str, str],
    status_code=status.HTTP_200_OK,
    tags=["ip"],
    summary="Echo the request headers.",
)
async def get_headers(request: Request) -> dict[str, str]:
    logger.info(f"Received request to get request headers count={len(request.headers)}")
    headers: dict[str, str] = {}
    for name, value in request.headers.items():
        headers[name] = f"{headers[name]}, {value}" if name in headers else value
    return headers


@app.get(
    "/api/config",
    response_model=AzureAdConfigResponse,
    responses={status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse}},
    status_code=status.HTTP_200_OK,
    tags=["config"],
    summary="Azure AD configuration for the SPA client.",
)
async def get_config(
    settings: Annotated[Settings, Depends(get_settings)],
) -> AzureAdConfigResponse | JSONResponse:
    """Public endpoint returning non-sensitive Azure AD configuration."""
    logger.info("Received request to get Azure AD configuration")
    try:
        return AzureAdConfigResponse(
            client_id=settings.azure_ad_client_id,
            tenant_id=settings.azure_ad_tenant_id,
            scopes=settings.spa_scopes,
        )
    except Exception as exc:
        logger.exception(f"Error occurred while getting Azure AD configuration error={exc!r}")
        return _error_response(CONFIG_ERROR)


@app.get(
    "/api/user/claims",
    response_model=ClaimsResponse,
    responses={
        status.HTTP_401_UNAUTHORIZED: {"description": "Missing or invalid bearer token"},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
    status_code=status.HTTP_200_OK,
    tags=["user"],
    summary="Claims from the authenticated user's token.",
)
async def get_user_claims(
    claims: Annotated[dict[str, Any], Depends(get_claims)],
) -> ClaimsResponse | JSONResponse:
    """Requires a valid Azure AD bearer token."""
    logger.info("Received request to get user claims")
    try:
        flat_claims = flatten_claims(claims)
        return ClaimsResponse(
            is_authenticated=True,
            name=flat_claims.get("name"),
            claims=flat_claims,
            scopes=extract_scopes(flat_claims),
        )
    except Exception as exc:
        logger.exception(f"Error occurred while getting user claims error={exc!r}")
        return _error_response(CLAIMS_ERROR)
