"""
Authentication dependencies.

The organization and admin APIs are called by the dashboard backend with a
shared service token. Webhooks are not routed through here.
"""

import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from fusioncaller.config import get_app_settings

# Security scheme for the service token
security = HTTPBearer(auto_error=False)


async def require_api_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    """
    Require a valid ``Authorization: Bearer <API_TOKEN>`` header.

    Args:
        credentials: The HTTP authorization credentials (optional)

    Returns:
        str: The accepted token

    Raises:
        HTTPException: 500 if no token is configured, 401 if the header is
            missing or wrong
    """
    expected = get_app_settings().api_token
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="API token not configured",
        )

    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No authentication token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not secrets.compare_digest(credentials.credentials, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return credentials.credentials
