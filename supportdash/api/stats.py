from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from supportdash.db.deps import get_db
from supportdash.schemas.analytics import StatsResponse
from supportdash.services.stats_engine import get_stats, placeholder_kpis

router = APIRouter(prefix="/api/stats", tags=["Dashboard"])

@router.get("", response_model=StatsResponse, response_model_exclude_none=True)
def dashboard_stats(db: Optional[Session] = Depends(get_db)):
    timestamp = datetime.now().isoformat()

    if db is None:
        return StatsResponse(
            success=True,
            data=placeholder_kpis(),
            configured=False,
            message="Base de datos no configurada. Usa datos de ejemplo.",
            timestamp=timestamp,
        )

    try:
        stats = get_stats(db)
    except Exception as e:
        print(f"Error fetching stats: {e}")
        failed = StatsResponse(
            success=False,
            error=str(e) or "Error desconocido",
            data=placeholder_kpis(),
            configured=False,
            timestamp=timestamp,
        )
        return JSONResponse(status_code=500, content=failed.model_dump(mode="json", by_alias=True, exclude_none=True))

    return StatsResponse(success=True, data=stats, configured=True, timestamp=timestamp)
