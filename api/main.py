"""
API Application Entry Point

Defines the main FastAPI application with middleware, route configuration,
and lifecycle management of the triage components.

Design Considerations:
- Triage components built once at startup and shared through app.state
- Processing queue drained on the application's event loop
- Pending queue items dropped, with a warning, on shutdown
"""

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.config import get_settings, EnvironmentType
from api.utils.error_handlers import add_exception_handlers
from api.routes import emails, dashboard
from triage.analyzers import EmailClassifier, ResponseGenerator
from triage.config import ANALYZER_CONFIG
from triage.ingestion import EmailIngestionService
from triage.integrations.groq import EnhancedGroqClient, ModelManager
from triage.knowledge import KnowledgeBase
from triage.processing import PriorityProcessingQueue
from triage.storage import EmailRepository
from triage.storage.database import init_db

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("api")


def build_components(app: FastAPI, settings) -> None:
    """
    Create the triage components and attach them to the application state.

    Args:
        app: Application whose state receives the components
        settings: Validated API settings
    """
    client_config = ANALYZER_CONFIG["client"]
    api_key = settings.GROQ_API_KEY.get_secret_value() if settings.GROQ_API_KEY else None
    client = EnhancedGroqClient(
        api_key=api_key,
        default_model=client_config["default_model"],
        max_retries=client_config["retry_count"],
        retry_delay=client_config["retry_delay"],
        metrics_file=client_config.get("metrics_file"),
    )
    model_manager = ModelManager(overrides=settings.model_overrides)

    repository = EmailRepository()
    classifier = EmailClassifier(client=client, model_manager=model_manager)
    responder = ResponseGenerator(
        client=client,
        knowledge_base=KnowledgeBase(),
        model_manager=model_manager,
    )
    queue = PriorityProcessingQueue(
        repository,
        responder,
        generation_timeout=settings.QUEUE_GENERATION_TIMEOUT_SECONDS,
        max_retries=settings.QUEUE_MAX_RETRIES,
    )
    ingestion = EmailIngestionService(
        repository=repository,
        classifier=classifier,
        queue=queue if settings.AUTO_ENQUEUE else None,
    )

    app.state.repository = repository
    app.state.classifier = classifier
    app.state.responder = responder
    app.state.queue = queue
    app.state.ingestion = ingestion


def create_application() -> FastAPI:
    """
    Create and configure FastAPI application instance.

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=settings.API_TITLE,
        description=settings.API_DESCRIPTION,
        version=settings.API_VERSION,
        docs_url="/docs" if settings.ENVIRONMENT != EnvironmentType.PRODUCTION else None,
        redoc_url="/redoc" if settings.ENVIRONMENT != EnvironmentType.PRODUCTION else None,
        debug=settings.DEBUG
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=settings.CORS_METHODS,
        allow_headers=["*"],
    )

    add_exception_handlers(app)

    app.include_router(emails.router)
    app.include_router(dashboard.router)

    @app.on_event("startup")
    async def startup_event():
        """Initialize storage and build the triage components."""
        logger.info("API service starting up")
        init_db()
        build_components(app, settings)
        logger.info(
            f"Processing queue ready (timeout={settings.QUEUE_GENERATION_TIMEOUT_SECONDS}s, "
            f"max_retries={settings.QUEUE_MAX_RETRIES}, auto_enqueue={settings.AUTO_ENQUEUE})"
        )

    @app.on_event("shutdown")
    async def shutdown_event():
        """Stop the queue worker before the event loop goes away."""
        queue = getattr(app.state, "queue", None)
        if queue is not None:
            await queue.close()
        logger.info("API service shutting down")

    logger.info(f"Application initialized in {settings.ENVIRONMENT.value} environment")
    return app


# Create application instance
app = create_application()


@app.get("/health", tags=["Monitoring"])
async def health_check():
    """API health check endpoint."""
    return {"status": "healthy"}
