import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from .core.config import settings
from .core.logging import configure_logging
from .db.base import Base
from .db.session import engine
from .api.routes import router
from .services.errors import ServiceError
from .services.line_client import LineApiError

logger = logging.getLogger(__name__)

app = FastAPI(title="Loyalty Card API", version=settings.APP_VERSION)


@app.on_event("startup")
def on_startup():
    configure_logging()
    Base.metadata.create_all(bind=engine)
    logger.info(f"Loyalty Card API started (env={settings.ENVIRONMENT})")


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message, "error": exc.error},
    )


@app.exception_handler(LineApiError)
async def line_error_handler(request: Request, exc: LineApiError):
    logger.error(f"LINE API failure on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=502,
        content={"success": False, "message": "LINEとの通信に失敗しました", "error": "LINE API error"},
    )


app.include_router(router)
