"""
DraftLens Backend - Main Application

Document analysis for a writing assistant: tone, readability, and
grammar/spelling suggestions reconciled from a remote checker and a
local dictionary.

Run with: uvicorn draftlens.main:app --reload
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import get_settings
from .models.schemas import ErrorResponse
from .routes import analysis_router, documents_router
from .services import CoordinatorRegistry, DocumentAnalyzer, get_suggestion_engine


logger = logging.getLogger(__name__)


def configure_logging() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_registry() -> CoordinatorRegistry:
    """One registry per application instance."""
    settings = get_settings()
    analyzer = DocumentAnalyzer(get_suggestion_engine())
    return CoordinatorRegistry(
        analyzer.analyze,
        debounce_seconds=settings.debounce_seconds
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.coordinators = build_registry()
    yield
    await app.state.coordinators.close_all()


configure_logging()


# Create FastAPI app
app = FastAPI(
    title="DraftLens API",
    description="""
## DraftLens Backend

Analysis engine for a writing assistant.

### Features

- Tone classification across five fixed categories
- Flesch Reading Ease, Flesch-Kincaid Grade and Automated Readability Index
- Grammar & spelling suggestions from a remote checker plus a local dictionary
- Per-document debounced analysis with stale-result suppression
- Retry with backoff and local-only fallback when the checker is down
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)


# CORS middleware (configure for your frontend origin in production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include API routers
app.include_router(analysis_router)
app.include_router(documents_router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "service": "DraftLens API",
        "status": "healthy",
        "version": __version__,
        "docs": "/docs"
    }


@app.get("/health")
async def health():
    """Detailed health check."""
    settings = get_settings()
    return {
        "status": "healthy",
        "grammar_provider": settings.grammar_provider,
        "debounce_seconds": settings.debounce_seconds,
        "retry": {
            "max_retries": settings.retry_max_retries,
            "base_delay": settings.retry_base_delay
        },
        "limits": {
            "max_text_length": settings.max_text_length,
            "min_tone_length": settings.min_tone_length,
            "min_readability_length": settings.min_readability_length
        }
    }


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    # Log the traceback, but NOT to the client
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error="Internal Server Error").model_dump()
    )


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "draftlens.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
