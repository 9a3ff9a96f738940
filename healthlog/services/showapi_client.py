"""
ShowAPI client - third-party drug and health knowledge data.

Every endpoint lives at https://route.showapi.com/<api-id> and takes the
app id and sign key as query parameters. Responses wrap the payload as::

    {"showapi_res_code": 0, "showapi_res_error": "", "showapi_res_body": {...}}
"""
from typing import Any, Dict, Optional

import httpx
from fastapi import HTTPException

from healthlog.config import settings

SHOWAPI_BASE_URL = "https://route.showapi.com"
HTTP_TIMEOUT = 15.0


class ShowApiError(Exception):
    """Raised when ShowAPI answers with a non-zero showapi_res_code"""


def require_credentials() -> None:
    """FastAPI dependency: refuse the call when the backend has no ShowAPI keys"""
    if not settings.SHOWAPI_APPID or not settings.SHOWAPI_APPKEY:
        raise HTTPException(status_code=500, detail="ShowAPI credentials are not configured")


async def call_showapi(api_id: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Call one ShowAPI endpoint

    Args:
        api_id: route id such as "546-1"
        params: endpoint parameters; None values are dropped

    Returns:
        showapi_res_body (empty dict when absent)

    Raises:
        ShowApiError: On a non-zero showapi_res_code
        httpx.HTTPError: On transport failures
    """
    query = {
        "showapi_appid": settings.SHOWAPI_APPID,
        "showapi_sign": settings.SHOWAPI_APPKEY,
    }
    for key, value in (params or {}).items():
        if value is not None:
            query[key] = value

    async with httpx.AsyncClient(timeout=HTTP_TIMEOUT) as client:
        response = await client.get(f"{SHOWAPI_BASE_URL}/{api_id}", params=query)
        response.raise_for_status()
        data = response.json()

    if data.get("showapi_res_code", 0) != 0:
        raise ShowApiError(data.get("showapi_res_error") or f"ShowAPI {api_id} request failed")

    return data.get("showapi_res_body") or {}
