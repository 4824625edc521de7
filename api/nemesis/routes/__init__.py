from fastapi import APIRouter, FastAPI

from .match import router as match_router
from .survey import router as survey_router


def include_modular_routers(app: FastAPI) -> None:
    app.include_router(survey_router, tags=["questionnaire"])
    app.include_router(match_router, tags=["matches"])


__all__ = ["include_modular_routers", "APIRouter"]
