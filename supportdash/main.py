from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from supportdash.api.analytics import router as analytics_router
from supportdash.api.stats import router as stats_router
from supportdash.api.stress import router as stress_router
from supportdash.api.testing import router as testing_router
from supportdash.core.config import CORS_ORIGINS, DATABASE_URL
from supportdash.db.session import make_engine, make_session_factory


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Shared clients live exactly as long as the app
    app.state.http_client = httpx.AsyncClient(follow_redirects=True)
    app.state.session_factory = None
    engine = None
    if DATABASE_URL:
        engine = make_engine(DATABASE_URL)
        app.state.session_factory = make_session_factory(engine)
    else:
        print("⚠️ DATABASE_URL not set, /api/stats and /api/analytics will serve placeholder data")

    yield

    await app.state.http_client.aclose()
    if engine is not None:
        engine.dispose()


app = FastAPI(title="Support Dashboard Backend", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- ERROR SHAPE: every error is {"error": "..."} ---
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = errors[0]["msg"] if errors else "Solicitud inválida"
    return JSONResponse(status_code=400, content={"error": f"Datos inválidos: {detail}"})

app.include_router(stress_router)
app.include_router(testing_router)
app.include_router(stats_router)
app.include_router(analytics_router)

@app.get("/")
def root():
    return {"status": "Support dashboard backend running"}
