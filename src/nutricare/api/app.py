"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from nutricare.api.routes import router as api_router
from nutricare.app_logging import configure_logging
from nutricare.containers import AppContainer
from nutricare.domain.errors import (
    FoodNotRecognized,
    InvalidInput,
    LookupUnavailable,
    MealLogNotFound,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(api_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.exception_handler(InvalidInput)
    async def invalid_input(request: Request, exc: InvalidInput) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": [
                    {
                        "loc": exc.field.split("."),
                        "msg": exc.message,
                        "type": "value_error",
                    }
                ]
            },
        )

    @app.exception_handler(MealLogNotFound)
    async def meal_not_found(request: Request, exc: MealLogNotFound) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": "Meal log not found"},
        )

    @app.exception_handler(FoodNotRecognized)
    async def food_not_recognized(
        request: Request, exc: FoodNotRecognized
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": str(exc)},
        )

    @app.exception_handler(LookupUnavailable)
    async def lookup_unavailable(
        request: Request, exc: LookupUnavailable
    ) -> JSONResponse:
        logger.warning("Nutrition lookup unavailable for %s", request.url.path)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Nutrition data temporarily unavailable"},
        )

    return app
