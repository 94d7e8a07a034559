import httpx
from fastapi import APIRouter, Depends, HTTPException

from supportdash.core.dependencies import get_http_client
from supportdash.schemas.stress import StressRequest, StressResponse
from supportdash.services.stress_runner import run_stress

router = APIRouter(prefix="/api/stress", tags=["Stress Test"])

@router.post("", response_model=StressResponse, response_model_exclude_none=True)
async def stress_test(
    payload: StressRequest,
    client: httpx.AsyncClient = Depends(get_http_client)
):
    if not (payload.webhook_url or "").strip():
        raise HTTPException(status_code=400, detail="webhookUrl es requerido.")

    return await run_stress(
        client,
        webhook_url=payload.webhook_url,
        api_key=payload.api_key,
        concurrency=payload.concurrency,
        message=payload.message,
    )
