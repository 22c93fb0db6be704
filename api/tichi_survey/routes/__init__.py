from fastapi import FastAPI

from .health import router as health_router
from .survey import router as survey_router


def include_modular_routers(app: FastAPI) -> None:
    app.include_router(survey_router, tags=["survey"])
    app.include_router(health_router, tags=["health"])


__all__ = ["include_modular_routers"]
