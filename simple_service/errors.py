class AppError(Exception):
    """Base application error for the simple IP service."""


class OutboundIpError(AppError):
    """Base error for outbound IP provider failures."""


class TransportError(OutboundIpError):
    """Raised when the upstream IP provider cannot be reached or answers with a non-2xx status."""


class MalformedResponseError(OutboundIpError):
    """Raised when the upstream IP provider body is not JSON or lacks the `ip` field."""


class InvalidTokenError(AppError):
    """Raised when a bearer token fails signature, audience, issuer or expiry validation."""
