from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from typing import Optional
import os
import logging

from pdf_mailer.config import Settings, settings as default_settings
from pdf_mailer.exceptions import StorageError
from pdf_mailer.routes import health_router, submission_router
from pdf_mailer.services.email_service import Notifier
from pdf_mailer.services.pdf_service import DocumentRenderer
from pdf_mailer.services.store import SubmissionStore
from pdf_mailer.services.submission_service import SubmissionService
from pdf_mailer.utils.templating import TemplateLibrary

# Enable logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def resolve_templates_dir(templates_dir: str) -> str:
    if os.path.isabs(templates_dir):
        return templates_dir
    return os.path.join(BASE_DIR, templates_dir)


def build_submission_service(settings: Settings) -> SubmissionService:
    """Wire the collaborators from settings; persistence only when DATABASE_URL is set."""
    store = None
    if settings.database_enabled:
        store = SubmissionStore(settings.DATABASE_URL)
    else:
        logger.warning("DATABASE_URL not set. Skipping database connection. Data will not be logged.")

    return SubmissionService(
        templates=TemplateLibrary.from_directory(resolve_templates_dir(settings.TEMPLATES_DIR)),
        renderer=DocumentRenderer(timeout_ms=settings.RENDER_TIMEOUT_MS),
        notifier=Notifier(settings),
        store=store,
        brand_name=settings.brand_name,
    )


def create_app(settings: Optional[Settings] = None, submission_service: Optional[SubmissionService] = None) -> FastAPI:
    settings = settings or default_settings
    app = FastAPI(title="PDF Emailer Backend", debug=settings.DEBUG)
    app.state.settings = settings
    app.state.submission_service = submission_service or build_submission_service(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for router in [submission_router, health_router]:
        app.include_router(router)
        logger.info(f"Included router: {router.prefix}")

    @app.get("/", include_in_schema=False, response_class=PlainTextResponse)
    async def root():
        return "PDF Emailer Backend is Running!"

    @app.on_event("startup")
    async def startup_event():
        logger.info("🚀 PDF Emailer Backend starting up...")
        store = app.state.submission_service.store
        if store is not None:
            try:
                store.create_tables()
                logger.info("Database connected")
            except StorageError as e:
                logger.error(f"Database connection error: {e}")
        logger.info(f"🌐 CORS enabled for origins: {settings.cors_origins}")
        logger.info("✅ Server is ready to handle requests")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("🛑 PDF Emailer Backend shutting down...")
        store = app.state.submission_service.store
        if store is not None:
            store.dispose()

    return app


# Init app
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "pdf_mailer.main:app",
        host="127.0.0.1",
        port=default_settings.PORT,
        reload=True,
        log_level="info"
    )
