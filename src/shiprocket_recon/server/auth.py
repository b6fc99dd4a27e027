"""
Authentication Middleware

Simple API key authentication for admin endpoints.
"""

from fastapi import Header, HTTPException, Request, status


async def verify_api_key(request: Request, x_api_key: str = Header(..., description="Dashboard API key")):
    """
    Verify API key from X-API-Key header against the app's configured key.

    Raises:
        HTTPException: If the key is invalid or no key is configured
    """
    expected_key = request.app.state.settings.dashboard_api_key

    if not expected_key:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin API not configured (DASHBOARD_API_KEY not set in environment)",
        )

    if x_api_key != expected_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    return True
