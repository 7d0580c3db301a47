"""
DevOps Guard - Main Application
===============================

Work item tracker for DevOps teams.

Modules:
- Work Items: CRUD, filtered listings and CI/CD event rules
- Metrics: backlog health, SLA breach rate, risk and daily snapshots

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities, rules and calculators
- Infrastructure: In-memory and SQL repositories, snapshot scheduler
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

# Configuration
from devops_guard.config import Settings, settings as default_settings

# Infrastructure
from devops_guard.infrastructure.database import (
    close_database,
    create_tables,
    get_session_maker,
    init_database,
)

# Modules
from devops_guard.metrics.application import MetricsService
from devops_guard.metrics.infrastructure import (
    DailySnapshotScheduler,
    InMemorySnapshotRepository,
    SQLAlchemySnapshotRepository,
)
from devops_guard.metrics.interfaces import metrics_router
from devops_guard.workitems.application import WorkItemService
from devops_guard.workitems.infrastructure import (
    InMemoryWorkItemRepository,
    SQLAlchemyWorkItemRepository,
)
from devops_guard.workitems.interfaces import workitems_router

# Middleware and logging
from devops_guard.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    register_exception_handlers,
)
from devops_guard.shared.infrastructure.logging import get_logger, setup_logging

logger = get_logger(__name__)


def _build_repositories(app_settings: Settings):
    """Pick the work item and snapshot stores for the configured backend."""
    if not app_settings.use_sql:
        return InMemoryWorkItemRepository(), InMemorySnapshotRepository()

    session_maker = get_session_maker()
    return (
        SQLAlchemyWorkItemRepository(session_maker),
        SQLAlchemySnapshotRepository(session_maker),
    )


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Services are created in the lifespan and stored on ``app.state`` so
    controllers can resolve them per request.
    """
    app_settings = app_settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        """
        STARTUP:
        1. Setup structured logging
        2. Initialize database and create tables (SQL backend only)
        3. Wire repositories and services
        4. Start the daily snapshot scheduler when enabled

        SHUTDOWN:
        1. Stop the scheduler
        2. Close database connections
        """
        # === STARTUP ===
        setup_logging(app_settings.log_level, app_settings.environment)
        logger.info("Starting DevOps Guard", extra={
            "version": app_settings.app_version,
            "environment": app_settings.environment,
            "backend": "sql" if app_settings.use_sql else "memory"
        })

        if app_settings.use_sql:
            logger.info("Initializing database")
            init_database(app_settings)
            # Models are registered on Base by the infrastructure imports above
            await create_tables()

        work_item_repository, snapshot_repository = _build_repositories(app_settings)
        work_item_service = WorkItemService(work_item_repository)
        metrics_service = MetricsService(work_item_repository, snapshot_repository)

        scheduler = None
        if app_settings.snapshot_scheduler_enabled:
            scheduler = DailySnapshotScheduler(
                metrics_service.capture_daily_snapshot,
                hour_local=app_settings.metrics_snapshot_hour_local
            )
            await scheduler.start()
        else:
            logger.info(
                "Snapshot scheduler disabled",
                extra={
                    "use_sql": app_settings.use_sql,
                    "metrics_auto_capture": app_settings.metrics_auto_capture
                }
            )

        # Store services in app state for dependency injection
        app.state.settings = app_settings
        app.state.work_item_service = work_item_service
        app.state.metrics_service = metrics_service
        app.state.snapshot_scheduler = scheduler

        logger.info("DevOps Guard started successfully")

        yield  # Application runs here

        # === SHUTDOWN ===
        logger.info("Shutting down DevOps Guard")

        if scheduler:
            await scheduler.stop()

        if app_settings.use_sql:
            await close_database()

        logger.info("DevOps Guard shutdown complete")

    app = FastAPI(
        title="DevOps Guard API",
        description=(
            "Tracks engineering work items, reacts to CI/CD and incident events "
            "and reports backlog health metrics."
        ),
        version=app_settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.settings = app_settings

    # === CORS Middleware ===
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # === Custom Middleware ===
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(CorrelationIDMiddleware)
    register_exception_handlers(app)

    # === Include Module Routers ===
    app.include_router(workitems_router)
    app.include_router(metrics_router)

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint for load balancers and orchestrators."""
        scheduler = getattr(request.app.state, "snapshot_scheduler", None)
        if scheduler is None:
            scheduler_state = "disabled"
        elif scheduler.is_running:
            scheduler_state = "running"
        else:
            scheduler_state = "stopped"

        checks = {
            "backend": "sql" if app_settings.use_sql else "memory",
            "snapshot_scheduler": scheduler_state,
        }
        if scheduler is not None and scheduler.next_run is not None:
            checks["next_snapshot"] = scheduler.next_run.isoformat()

        return {
            "status": "healthy",
            "version": app_settings.app_version,
            "environment": app_settings.environment,
            "checks": checks
        }

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "service": "DevOps Guard",
            "version": app_settings.app_version,
            "docs": "/docs",
            "health": "/health",
            "modules": {
                "workitems": {
                    "prefix": "/workitems",
                    "endpoints": [
                        "POST /workitems - Create work item",
                        "GET /workitems - List work items",
                        "GET /workitems/{id} - Get work item",
                        "PATCH /workitems/{id} - Update work item",
                        "DELETE /workitems/{id} - Delete work item",
                        "POST /events/ingest - Apply event rules",
                        "POST /dev/seed - Seed demo data"
                    ]
                },
                "metrics": {
                    "prefix": "/metrics",
                    "endpoints": [
                        "GET /metrics - Current backlog health",
                        "GET /metrics/history - Daily snapshots",
                        "POST /metrics/snapshots - Capture today's snapshot"
                    ]
                }
            }
        }

    return app


app = create_app()


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "devops_guard.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.environment == "development",
        log_level="info"
    )
