from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from supportdash.db.deps import get_db
from supportdash.schemas.analytics import AnalyticsResponse
from supportdash.services.analytics_engine import empty_analytics, get_analytics

router = APIRouter(prefix="/api/analytics", tags=["Dashboard"])

@router.get("", response_model=AnalyticsResponse, response_model_exclude_none=True)
def dashboard_analytics(db: Optional[Session] = Depends(get_db)):
    timestamp = datetime.now().isoformat()

    if db is None:
        return AnalyticsResponse(
            success=True,
            data=empty_analytics(),
            configured=False,
            message="Base de datos no configurada.",
            timestamp=timestamp,
        )

    try:
        analytics = get_analytics(db)
    except Exception as e:
        print(f"Error fetching analytics: {e}")
        failed = AnalyticsResponse(
            success=False,
            error=str(e) or "Error desconocido",
            data=empty_analytics(),
            configured=False,
            timestamp=timestamp,
        )
        return JSONResponse(status_code=500, content=failed.model_dump(mode="json", by_alias=True, exclude_none=True))

    return AnalyticsResponse(success=True, data=analytics, configured=True, timestamp=timestamp)
