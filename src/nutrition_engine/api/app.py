"""FastAPI application factory."""

from fastapi import FastAPI

from nutrition_engine.api.calculations import router as calculations_router
from nutrition_engine.app_logging import configure_logging
from nutrition_engine.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level.upper())

    app = FastAPI(title="Nutrition Engine")
    app.state.container = container

    app.include_router(calculations_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
