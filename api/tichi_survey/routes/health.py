from fastapi import APIRouter

from ..config import APP_ENV
from ..database import store_ready

router = APIRouter()


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "env": APP_ENV, "store": "connected" if store_ready() else "disconnected"}
