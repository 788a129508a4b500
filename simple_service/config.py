import os
from functools import lru_cache

from pydantic import BaseModel, Field

DEFAULT_IPIFY_URL = "https://api.ipify.org?format=json"
DEFAULT_TENANT_ID = "consumers"


class Settings(BaseModel):
    """Runtime configuration, read from environment variables.

    Client and tenant identifiers are public values, not secrets; they are
    handed to the SPA through `/api/config`.
    """

    azure_ad_instance: str = "https://login.microsoftonline.com"
    azure_ad_client_id: str = ""
    azure_ad_tenant_id: str = DEFAULT_TENANT_ID
    azure_ad_full_scopes: str | None = None
    ipify_url: str = DEFAULT_IPIFY_URL
    ipify_timeout_seconds: float = Field(default=5.0, gt=0)
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    @property
    def authority(self) -> str:
        return f"{self.azure_ad_instance.rstrip('/')}/{self.azure_ad_tenant_id}"

    @property
    def jwks_uri(self) -> str:
        return f"{self.authority}/discovery/v2.0/keys"

    @property
    def valid_audiences(self) -> list[str]:
        """Tokens may carry either the App ID URI or the bare client id as audience."""
        return [f"api://{self.azure_ad_client_id}", self.azure_ad_client_id]

    @property
    def valid_issuers(self) -> list[str]:
        # v2.0 endpoint tokens and v1.0 (sts.windows.net) tokens.
        return [
            f"{self.authority}/v2.0",
            f"https://sts.windows.net/{self.azure_ad_tenant_id}/",
        ]

    @property
    def default_scope(self) -> str:
        return f"api://{self.azure_ad_client_id}/User.Read"

    @property
    def spa_scopes(self) -> list[str]:
        """Scopes requested by the SPA: AZURE_AD_FULL_SCOPES if set, else the default API scope."""
        if self.azure_ad_full_scopes is not None:
            return self.azure_ad_full_scopes.split()
        return [self.default_scope]


def load_settings() -> Settings:
    """Build Settings from the current process environment."""
    origins = os.getenv("CORS_ALLOW_ORIGINS", "*")
    return Settings(
        azure_ad_instance=os.getenv("AZURE_AD_INSTANCE", "https://login.microsoftonline.com"),
        azure_ad_client_id=os.getenv("AZURE_AD_CLIENT_ID", ""),
        azure_ad_tenant_id=os.getenv("AZURE_AD_TENANT_ID") or DEFAULT_TENANT_ID,
        azure_ad_full_scopes=os.getenv("AZURE_AD_FULL_SCOPES"),
        ipify_url=os.getenv("IPIFY_URL", DEFAULT_IPIFY_URL),
        ipify_timeout_seconds=float(os.getenv("IPIFY_TIMEOUT_SECONDS", "5.0")),
        cors_allow_origins=[o.strip() for o in origins.split(",") if o.strip()],
    )


@lru_cache
def get_settings() -> Settings:
    """Dependency to provide the process-wide Settings instance."""
    return load_settings()
