"""
Main FastAPI application entry point.
"""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from nbhwc_api.core.config import settings
from nbhwc_api.core.database import init_db
from nbhwc_api.core.errors import register_exception_handlers
from nbhwc_api.core.logging import configure_logging
from nbhwc_api.api.auth import router as auth_router
from nbhwc_api.api.users import router as users_router
from nbhwc_api.api.quizzes import router as quizzes_router
from nbhwc_api.api.analytics import router as analytics_router
from nbhwc_api.api.content import router as content_router

configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
logger = logging.getLogger(__name__)

if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        integrations=[FastApiIntegration(transaction_style="endpoint"), SqlalchemyIntegration()],
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
    )

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}...")
    if settings.DATABASE_CREATE_ALL:
        init_db()
    yield
    logger.info("Shutdown complete")

app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)
app.add_middleware(CORSMiddleware, allow_origins=settings.CORS_ORIGINS, allow_credentials=True, allow_methods=["*"], allow_headers=["*"])
register_exception_handlers(app)

prefix = settings.API_PREFIX
app.include_router(auth_router, prefix=f"{prefix}/auth", tags=["auth"])
app.include_router(users_router, prefix=f"{prefix}/user", tags=["user"])
app.include_router(quizzes_router, prefix=f"{prefix}/quiz", tags=["quizzes"])
app.include_router(analytics_router, prefix=f"{prefix}/analytics", tags=["analytics"])
app.include_router(content_router, prefix=prefix, tags=["content"])

@app.get("/health")
def health(): return {"status": "ok", "version": settings.APP_VERSION}

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("nbhwc_api.main:app", host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
