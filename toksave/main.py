import logging
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from toksave.api import health, retrieve, history
from toksave.config.settings import config
from toksave.core.logging import setup_logging
from toksave.core.state import state
from toksave.infra.redis import init_redis, close_redis
from toksave.infra.storage import build_storage
from toksave.services.history import HistoryStore
from toksave.services.retriever import VideoRetriever
from toksave.services.upstream import UpstreamClient

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(config)

    if not config.upstream.api_key:
        logger.warning("No RapidAPI key configured (RAPIDAPI_KEY); upstream calls will be rejected")

    upstream = None
    try:
        redis = await init_redis() if config.history.backend == "redis" else None
        storage, state.history_backend = build_storage(config, redis)

        state.history = HistoryStore(storage, max_size=config.history.max_size)
        await state.history.load()
        logger.info(f"History loaded from {state.history_backend} backend ({len(state.history.entries)} entries)")

        upstream = UpstreamClient(config.upstream)
        state.retriever = VideoRetriever(upstream)

        yield
    finally:
        if upstream is not None:
            await upstream.aclose()
        await close_redis()

app = FastAPI(
    title=config.api.title,
    description=config.api.description,
    version=config.api.version,
    docs_url="/docs" if config.api.debug else None,
    redoc_url=None,
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.api.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Error-Code", "X-Retryable"],
)

@app.middleware("http")
async def assign_request_id(request: Request, call_next):
    request.state.request_id = uuid.uuid4().hex[:8]
    response = await call_next(request)
    response.headers["X-Request-ID"] = request.state.request_id
    return response

# Routes
app.include_router(health.router, tags=["Health"])
app.include_router(retrieve.router, tags=["Retrieve"])
app.include_router(history.router, tags=["History"])
