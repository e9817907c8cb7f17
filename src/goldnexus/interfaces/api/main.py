# src/goldnexus/interfaces/api/main.py
import logging
import time

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from goldnexus import __version__
from goldnexus.config import settings
from goldnexus.boot import build_services
from goldnexus.logging_conf import setup_logging
from goldnexus.infrastructure.db.uow import create_tables
from goldnexus.interfaces.api.routers import auth as auth_router
from goldnexus.interfaces.api.routers import gold_price as gold_price_router
from goldnexus.interfaces.api.routers import users as users_router
from goldnexus.interfaces.api.metrics import router as metrics_router, REQUESTS, LATENCY, route_label

log = logging.getLogger(__name__)

# --- FastAPI App ---
app = FastAPI(title="GoldNexus API", version=__version__)
app.state.services = None

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def record_metrics(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    if settings.METRICS_ENABLED:
        LATENCY.labels(route_label(request)).observe(time.perf_counter() - started)
        REQUESTS.labels(request.method, str(response.status_code)).inc()
    return response

@app.on_event("startup")
async def on_startup():
    setup_logging()
    log.info("Application startup sequence initiated...")
    create_tables()
    try:
        app.state.services = build_services()
    except Exception as e:
        # Endpoints answer 503 until the configuration is fixed.
        log.critical(f"FATAL: Could not build services: {e}")
        return
    log.info("Application startup complete.")

@app.get("/")
def root(): return {"message": "GoldNexus API Running"}

@app.get("/health")
def health_check(): return {"status": "ok"}

app.include_router(auth_router.router)
app.include_router(users_router.router)
app.include_router(gold_price_router.router)
app.include_router(metrics_router)


def run():
    """Run the server (uvicorn)."""
    uvicorn.run("goldnexus.interfaces.api.main:app", host="0.0.0.0", port=8000)
