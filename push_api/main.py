# push_api/main.py
"""
App FastAPI: CORS, lifespan (cliente HTTP compartido), router de push +
middleware de trazas.
"""
import logging, time

# Cargar .env ANTES de importar config/routers
from dotenv import load_dotenv, find_dotenv
load_dotenv(find_dotenv(usecwd=True))

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .routes import push
from .telemetry.logging import setup_logging

setup_logging()
http_logger = logging.getLogger("push_api.http")


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.http = httpx.AsyncClient(timeout=settings.FCM_HTTP_TIMEOUT)
    yield
    await app.state.http.aclose()


app = FastAPI(title="SOC Metrópoli Push API", version="0.1.0", lifespan=lifespan)

# ---------------- CORS ----------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------- Middleware de trazas ----------------
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    try:
        response = await call_next(request)
        dur = round(time.time() - start, 4)
        http_logger.info(f"{request.method} {request.url.path} -> {response.status_code} in {dur}s")
        return response
    except Exception as e:
        dur = round(time.time() - start, 4)
        http_logger.exception(f"{request.method} {request.url.path} EXC after {dur}s: {e}")
        raise


# ---------------- Healthcheck ----------------
@app.get("/health", tags=["misc"])
async def health():
    return {"ok": True}


# ---------------- Routers ----------------
app.include_router(push.router, prefix="/api", tags=["push"])
