"""
Health information lookups proxied to ShowAPI - common diseases (546-x)
and health knowledge articles (90-8x)
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from healthlog.models.schemas import DiseaseListQuery, KnowledgeSearchQuery
from healthlog.services.auth import get_current_user_id
from healthlog.services.showapi_client import ShowApiError, call_showapi, require_credentials
from healthlog.utils.errors import server_error

router = APIRouter(
    prefix="/api/health-info",
    dependencies=[Depends(get_current_user_id), Depends(require_credentials)],
)


async def _proxy(where: str, api_id: str, params: Optional[dict] = None):
    try:
        return await call_showapi(api_id, params)
    except ShowApiError as e:
        print(f"ShowAPI {api_id} failed in {where}: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        return server_error(where, e)


# --- Common diseases ---

@router.get("/disease/categories")
async def disease_categories():
    return await _proxy("disease_categories", "546-1")


@router.post("/disease/list")
async def disease_list(body: DiseaseListQuery):
    return await _proxy(
        "disease_list",
        "546-2",
        {"key": body.key, "classifyId": body.classify_id, "page": body.page},
    )


@router.get("/disease/detail/{disease_id}")
async def disease_detail(disease_id: str):
    return await _proxy("disease_detail", "546-3", {"id": disease_id})


# --- Health knowledge ---

@router.get("/knowledge/categories")
async def knowledge_categories():
    return await _proxy("knowledge_categories", "90-86")


@router.post("/knowledge/search")
async def knowledge_search(body: KnowledgeSearchQuery):
    return await _proxy(
        "knowledge_search",
        "90-87",
        {"key": body.key, "tid": body.tid, "page": body.page},
    )


@router.get("/knowledge/detail/{article_id}")
async def knowledge_detail(article_id: str):
    return await _proxy("knowledge_detail", "90-88", {"id": article_id})
