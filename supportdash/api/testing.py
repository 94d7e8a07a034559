from datetime import date
import io

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request, UploadFile, File
from fastapi.responses import StreamingResponse
from pydantic import ValidationError

from supportdash.core.dependencies import get_http_client
from supportdash.schemas.testing import (
    TestExportRequest,
    TestImportResponse,
    TestRunRequest,
    TestRunResponse,
)
from supportdash.services.csv_io import export_results_csv, parse_test_cases_csv
from supportdash.services.qa_runner import resolve_settings, run_test_cases

router = APIRouter(prefix="/api/testing", tags=["Agent QA"])

@router.post("", response_model=TestRunResponse, response_model_exclude_none=True)
async def run_agent_tests(
    request: Request,
    client: httpx.AsyncClient = Depends(get_http_client)
):
    # 1. Parse body (malformed JSON is an internal error, bad fields are a 400)
    try:
        body = await request.json()
        payload = TestRunRequest.model_validate(body or {})
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Datos inválidos: {e.errors()[0]['msg']}")
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error interno: {e}")

    # 2. Merge config with environment defaults
    settings = resolve_settings(payload.config)
    if not settings.is_complete:
        raise HTTPException(
            status_code=400,
            detail="Falta API URL o API Key. Configurá las variables de entorno o ingresalas manualmente."
        )

    # 3. Run (per-case failures come back as results, not exceptions)
    try:
        return await run_test_cases(client, payload.test_cases or [], settings)
    except Exception as e:
        print(f"Run Failed: {e}")
        raise HTTPException(status_code=500, detail=f"Error interno: {e}")

@router.post("/import", response_model=TestImportResponse)
async def import_test_cases(file: UploadFile = File(...)):
    # CSV columns: Pregunta, Respuesta Esperada (or no header at all)
    raw = await file.read()
    try:
        content = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="El archivo debe estar codificado en UTF-8.")

    test_cases = parse_test_cases_csv(content)
    return TestImportResponse(test_cases=test_cases, count=len(test_cases))

@router.post("/export/csv")
def export_results(payload: TestExportRequest):
    content = export_results_csv(payload.results)
    filename = f"test-results-{date.today().isoformat()}.csv"

    return StreamingResponse(
        io.BytesIO(content.encode("utf-8")),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )
