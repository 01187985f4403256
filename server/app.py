"""FastAPI application for the StellarMind exploration service."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from server import settings
from server.api_key_routes import router as api_key_router
from server.auth_routes import router as auth_router
from server.dependencies import close_llm_clients, get_kv_store
from server.explore_routes import router as explore_router
from server.model_routes import router as model_router
from server.session_routes import router as session_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the database on startup; close LLM clients on shutdown."""
    get_kv_store()
    logger.info("StellarMind API ready (db: %s)", settings.DB_PATH)
    yield
    await close_llm_clients()


app = FastAPI(
    title="StellarMind API",
    description="Recursive question/answer exploration streamed as server-sent events",
    version="0.2.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# include routes
app.include_router(explore_router, prefix="/api")
app.include_router(model_router, prefix="/api")
app.include_router(auth_router, prefix="/api")
app.include_router(session_router, prefix="/api")
app.include_router(api_key_router, prefix="/api")


@app.get("/")
def root():
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": "0.2.0",
        "mock_mode": not (settings.OPENAI_API_KEY or settings.ANTHROPIC_API_KEY),
        "endpoints": {
            "explore": "/api/explore",
            "models": "/api/models/available",
            "auth": "/api/auth/login",
            "sessions": "/api/sessions",
            "api_keys": "/api/api-keys",
        },
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
