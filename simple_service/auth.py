"""
Azure AD bearer token validation for protected routes.

Signing keys come from the tenant's JWKS endpoint. Tokens are accepted for
either `api://<client id>` or the bare client id as audience, since Azure AD
issues both depending on how the scope was requested.
"""
import json
from functools import lru_cache
from logging import Logger
from typing import Annotated, Any

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2AuthorizationCodeBearer
from jwt import PyJWKClient

from simple_service.config import Settings, get_settings
from simple_service.errors import InvalidTokenError
from simple_service.logger import get_component_logger

_settings = get_settings()

# Also drives the "Authorize" button (PKCE) in Swagger UI.
oauth2_scheme = OAuth2AuthorizationCodeBearer(
    authorizationUrl=f"{_settings.authority}/oauth2/v2.0/authorize",
    tokenUrl=f"{_settings.authority}/oauth2/v2.0/token",
    scopes={_settings.default_scope: "Read user information"},
    auto_error=False,
)


class AzureAdTokenValidator:
    """Validates Azure AD access tokens and returns their claims."""

    ALGORITHMS = ["RS256"]

    def __init__(self, settings: Settings, jwks_client: PyJWKClient, logger: Logger | None = None) -> None:
        self._settings = settings
        self._jwks_client = jwks_client
        self._logger = logger or get_component_logger("auth")

    def validate(self, token: str) -> dict[str, Any]:
        """Verify signature, expiry, audience and issuer. Raises InvalidTokenError."""
        if not self._settings.azure_ad_client_id:
            raise InvalidTokenError("AZURE_AD_CLIENT_ID is not configured; no audience can be accepted")

        try:
            signing_key = self._jwks_client.get_signing_key_from_jwt(token)
            claims = jwt.decode(
                token,
                signing_key.key,
                algorithms=self.ALGORITHMS,
                audience=self._settings.valid_audiences,
                options={"verify_exp": True, "verify_aud": True, "require": ["exp", "aud", "iss"]},
            )
        except jwt.PyJWTError as exc:
            raise InvalidTokenError(f"Token verification failed: {exc}") from exc

        # Azure AD uses a different issuer per token version, so issuer is matched here.
        issuer = claims.get("iss")
        if issuer not in self._settings.valid_issuers:
            raise InvalidTokenError(f"Invalid issuer: {issuer}")

        return claims


@lru_cache
def get_token_validator() -> AzureAdTokenValidator:
    """Dependency to provide the shared validator; PyJWKClient caches the JWK set."""
    settings = get_settings()
    jwks_client = PyJWKClient(uri=settings.jwks_uri, cache_jwk_set=True, lifespan=300)
    return AzureAdTokenValidator(settings, jwks_client)


def _unauthorized(description: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": "invalid_token", "error_description": description},
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_bearer_token(token: Annotated[str | None, Depends(oauth2_scheme)]) -> str:
    """Extract the Bearer token from the Authorization header. Raises 401 if missing."""
    if not token:
        raise _unauthorized("Bearer token missing")
    return token


def get_claims(
    token: Annotated[str, Depends(get_bearer_token)],
    validator: Annotated[AzureAdTokenValidator, Depends(get_token_validator)],
) -> dict[str, Any]:
    """Dependency: valid Bearer token -> decoded claims."""
    try:
        return validator.validate(token)
    except InvalidTokenError as exc:
        get_component_logger("auth").info(f"Rejected bearer token: {exc}")
        raise _unauthorized("Token verification failed") from exc


def _claim_value_to_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


def flatten_claims(claims: dict[str, Any]) -> dict[str, str]:
    """Shorten URI claim types to their last segment and render every value as a string.

    Multi-valued claims, and claims whose short names collide, are joined with ", ".
    """
    grouped: dict[str, list[str]] = {}
    for claim_type, value in claims.items():
        short_type = claim_type.split("/")[-1]
        values = value if isinstance(value, list) else [value]
        grouped.setdefault(short_type, []).extend(_claim_value_to_str(v) for v in values)
    return {claim_type: ", ".join(values) for claim_type, values in grouped.items()}


def extract_scopes(claims: dict[str, str]) -> list[str]:
    """Delegated scopes from the space separated `scp` claim."""
    scp = claims.get("scp")
    if not scp:
        return []
    return scp.split(" ")
