from fastapi import APIRouter

from ..utils import utc_timestamp

router = APIRouter()


@router.get("/health")
async def health():
    return {"status": "OK", "timestamp": utc_timestamp()}
