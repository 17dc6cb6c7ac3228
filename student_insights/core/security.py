# student_insights/core/security.py
import secrets
from typing import Optional

from fastapi import Header, HTTPException, status

from student_insights.core.config import get_settings


async def get_api_key(x_api_key: Optional[str] = Header(None)) -> None:
    """
    API key check for the counselor-facing endpoints.
    Disabled while ``API_KEY`` is not configured.
    """
    expected = get_settings().API_KEY
    if not expected:
        return
    if not x_api_key or not secrets.compare_digest(x_api_key, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
        )
