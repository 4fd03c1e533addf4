"""Bearer credential extraction for MCP Server.

The gateway has no credential of its own. Whatever bearer token the
caller sends is forwarded unmodified to Looker; the only policy here is
whether a token is present at all.
"""

from typing import Mapping, Optional

from fastapi import Request
from pydantic import SecretStr

from shared.errors import AuthRequiredError
from shared.logging import get_logger

logger = get_logger(__name__)

AUTHORIZATION_HEADER = "authorization"
BEARER_PREFIX = "Bearer "


def extract_credential(headers: Mapping[str, str]) -> Optional[SecretStr]:
    """
    Extract a bearer credential from request headers.

    The header name is matched case-insensitively; the "Bearer " scheme
    prefix is matched case-sensitively.

    Args:
        headers: Request headers

    Returns:
        The token, or None for a missing header, another scheme or an empty token
    """
    header = None
    for name, value in headers.items():
        if name.lower() == AUTHORIZATION_HEADER:
            header = value
            break

    if not header or not header.startswith(BEARER_PREFIX):
        return None

    token = header[len(BEARER_PREFIX):]
    if not token.strip():
        return None

    return SecretStr(token)


def require_credential(credential: Optional[SecretStr], message: str) -> SecretStr:
    """
    Return the credential, or raise if it is absent.

    Raises:
        AuthRequiredError: If no credential was supplied
    """
    if credential is None:
        logger.warning("Credential required but missing")
        raise AuthRequiredError(message)
    return credential


async def get_credential(request: Request) -> Optional[SecretStr]:
    """FastAPI dependency returning the request's bearer credential, if any."""
    return extract_credential(request.headers)
