from typing import Any, Dict

from fastapi import APIRouter

from intake_agent.config import get_settings

router = APIRouter()


@router.get("/")
def healthcheck() -> Dict[str, Any]:
    return {"status": "ok", "generative": get_settings().generative_enabled}
