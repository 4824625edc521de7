import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import LOG_LEVEL
from .routes import include_modular_routers
from .services.errors import InvalidInput

logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


setup_logging(LOG_LEVEL)

app = FastAPI(title="Nemesis Match API")
include_modular_routers(app)


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput) -> JSONResponse:
    logger.warning(
        "[INVALID_INPUT] path=%s detail=%s offending_ids=%s", request.url.path, exc.message, exc.offending_ids
    )
    return JSONResponse(status_code=422, content=exc.to_dict())


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
