import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.router import api_router
from app.core.config import Settings, get_settings
from app.core.logging import configure_logging
from app.services.cache.explanation_cache import ExplanationCache
from app.services.llm.explanation_service import ExplanationService
from app.services.llm.groq_client import GroqClient
from app.services.pharmacogenomics.risk_engine import create_risk_engine
from app.services.pharmacogenomics.tables import load_lookup_tables
from app.services.pipeline.analysis_pipeline import AnalysisPipeline

logger = logging.getLogger(__name__)


def build_pipeline(settings: Settings, generator=None) -> AnalysisPipeline:
    """Load the lookup tables and wire the per-process analysis services."""
    tables = load_lookup_tables(settings.data_dir)
    return AnalysisPipeline(
        risk_engine=create_risk_engine(tables),
        explanation_service=ExplanationService(
            generator or GroqClient(settings),
            timeout_seconds=settings.llm_timeout_seconds,
        ),
        cache=ExplanationCache(max_entries=settings.cache_max_entries),
    )


def create_app(
    settings: Optional[Settings] = None,
    pipeline: Optional[AnalysisPipeline] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        description="Pharmacogenomic risk analysis with LLM-generated explanations",
        version="1.0.0"
    )

    # CORS Configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.pipeline = pipeline or build_pipeline(settings)

    # Include API Routers
    app.include_router(api_router, prefix="/api")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal Server Error"})

    @app.on_event("shutdown")
    async def shutdown_event():
        generator = app.state.pipeline.explanation_service.generator
        if isinstance(generator, GroqClient):
            await generator.aclose()

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "service": "PharmaGuard"}

    logger.info("%s ready (%s)", settings.app_name, settings.environment)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
