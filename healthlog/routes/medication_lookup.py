"""
Medication lookups proxied to ShowAPI

- Barcode to product info (1145-2)
- Drug classification tree (1468-1)
- Drug encyclopedia search by name, manufacturer or approval number (1468-3)
"""
from fastapi import APIRouter, Depends, HTTPException

from healthlog.models.schemas import EncyclopediaQuery
from healthlog.services.auth import get_current_user_id
from healthlog.services.showapi_client import ShowApiError, call_showapi, require_credentials
from healthlog.utils.errors import server_error

router = APIRouter(
    prefix="/api/medication-lookup",
    dependencies=[Depends(get_current_user_id), Depends(require_credentials)],
)

ENCYCLOPEDIA_PAGE_SIZE = 20


def map_barcode_result(info: dict) -> dict:
    """Reduce a 1145-2 body to the fields the medication form fills in"""
    return {
        "name": info.get("name") or info.get("goodsName"),
        "spec": info.get("spec") or info.get("standard"),
        "brand": info.get("brandName"),
        "price": info.get("price"),
        "raw": info,
    }


@router.get("/lookup/{barcode}")
async def lookup_barcode(barcode: str):
    try:
        info = await call_showapi("1145-2", {"code": barcode})
    except ShowApiError as e:
        print(f"ShowAPI barcode lookup failed for {barcode}: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        return server_error("lookup_barcode", e)

    if info.get("ret_code") != 0:
        raise HTTPException(
            status_code=404,
            detail=info.get("remark") or "No medication found for this barcode",
        )
    return map_barcode_result(info)


@router.get("/categories")
async def medication_categories():
    try:
        return await call_showapi("1468-1")
    except ShowApiError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        return server_error("medication_categories", e)


@router.post("/encyclopedia")
async def search_encyclopedia(body: EncyclopediaQuery):
    params = {
        "searchKey": body.search_key,
        "searchType": body.search_type,
        "classifyId": body.classify_id,
        "page": body.page,
        "maxResult": ENCYCLOPEDIA_PAGE_SIZE,
    }
    try:
        return await call_showapi("1468-3", params)
    except ShowApiError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        return server_error("search_encyclopedia", e)
