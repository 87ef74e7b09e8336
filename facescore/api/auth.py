"""Bearer API-key authentication for service-to-service callers"""
import hmac
import logging
import os
from fastapi import HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from facescore.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_api_keys() -> list[str]:
    """Keys are read per request so rotating API_KEYS needs no restart"""
    return [key.strip() for key in os.getenv("API_KEYS", "").split(",") if key.strip()]


def _matches_any(candidate: str, valid_keys: list[str]) -> bool:
    return any(hmac.compare_digest(candidate.encode(), key.encode()) for key in valid_keys)


async def verify_api_key(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """
    Return the caller's API key

    Raises:
        HTTPException: 503 when API_KEYS is empty
        AuthenticationError: unknown key (mapped to 401 by the server)
    """
    valid_keys = get_api_keys()
    if not valid_keys:
        logger.error("[AUTH] API_KEYS is empty, rejecting request")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="API authentication not configured"
        )

    if not _matches_any(credentials.credentials, valid_keys):
        raise AuthenticationError("Unknown API key", operation="verify_api_key")

    return credentials.credentials
