"""
ATEC Platform FastAPI Application

Autism Treatment Evaluation Checklist administration and score history service.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from atec.api.responses import register_exception_handlers
from atec.config import settings
from atec.container import Container, build_container

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events.

    Startup:
    - Configure logging
    - Build the service container (unless one was injected)
    - Verify database and Redis connections

    Shutdown:
    - Wait for detached background tasks
    - Close database and Redis connections
    """
    configure_logging()
    logger.info("ATEC Platform starting...")

    container: Container | None = getattr(app.state, "container", None)
    if container is None:
        container = build_container(settings)
        app.state.container = container

    try:
        async with container.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection verified")
        await container.warm_up()
        logger.info("Redis connection verified")
    except Exception as e:
        logger.error(f"Startup dependency check failed: {e}")
        await container.close()
        raise

    logger.info("ATEC Platform ready")

    yield

    logger.info("ATEC Platform shutting down...")
    await container.close()
    logger.info("Shutdown complete")


def create_app(container: Container | None = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        container: Pre-built services (tests); built at startup when None

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="ATEC Platform",
        description="Autism Treatment Evaluation Checklist service",
        version=VERSION,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
    )

    if container is not None:
        app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_local else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Health check endpoints
    @app.get("/", tags=["Health"])
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {
            "service": "ATEC Platform",
            "status": "operational",
            "version": VERSION,
            "environment": settings.ENVIRONMENT,
        }

    @app.get("/ping", tags=["Health"])
    async def ping() -> dict[str, str]:
        return {"message": "pong"}

    @app.get("/health", tags=["Health"], response_model=None)
    async def health_check() -> JSONResponse:
        """Health check endpoint for load balancers.

        Returns:
            - status: healthy/unhealthy
            - checks: Individual health checks
        """
        services: Container = app.state.container
        checks: dict[str, dict[str, Any]] = {}

        try:
            async with services.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            checks["database"] = {"status": "healthy"}
        except Exception as e:
            checks["database"] = {"status": "unhealthy", "error": str(e)}

        try:
            await services.redis.ping()
            checks["redis"] = {"status": "healthy"}
        except Exception as e:
            checks["redis"] = {"status": "unhealthy", "error": str(e)}

        checks["background_tasks"] = {"status": "healthy", "pending": services.tasks.pending}

        all_healthy = all(check["status"] == "healthy" for check in checks.values())
        status_code = 200 if all_healthy else 503

        return JSONResponse(
            status_code=status_code,
            content={
                "status": "healthy" if all_healthy else "unhealthy",
                "environment": settings.ENVIRONMENT,
                "checks": checks,
            },
        )

    @app.get("/health/ready", tags=["Health"], response_model=None)
    async def readiness_check() -> dict[str, str] | JSONResponse:
        """Readiness check for Kubernetes.

        Returns 200 when app is ready to serve traffic.
        """
        services: Container = app.state.container
        try:
            async with services.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            await services.redis.ping()
            return {"status": "ready"}
        except Exception:
            return JSONResponse(
                status_code=503,
                content={"status": "not_ready"},
            )

    @app.get("/health/live", tags=["Health"])
    async def liveness_check() -> dict[str, str]:
        """Liveness check for Kubernetes.

        Returns 200 if app is alive (even if not fully functional).
        """
        return {"status": "alive"}

    # Register API routers
    from atec.api.v1 import auth, children, packages, questionnaires, users

    app.include_router(auth.router, prefix="/v1/auth", tags=["Auth"])
    app.include_router(packages.router, prefix="/v1/atec/packages", tags=["Packages"])
    app.include_router(
        questionnaires.router, prefix="/v1/atec/questionnaires", tags=["Questionnaires"]
    )
    app.include_router(children.router, prefix="/v1/children", tags=["Children"])
    app.include_router(users.router, prefix="/v1/users", tags=["Users"])

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "atec.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
        timeout_graceful_shutdown=settings.SHUTDOWN_GRACE_SECONDS,
    )
