import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mealman.app.api.routes import api_router
from mealman.app.core.config import get_settings
from mealman.app.core.errors import InferenceError, RecipeServiceError

logger = logging.getLogger(__name__)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", []) if part is not None)
        msg = err.get("msg", "Invalid value")
        details.append(f"{loc}: {msg}" if loc else msg)
    return JSONResponse(
        status_code=400,
        content={
            "error": "InvalidInput",
            "message": "Invalid request payload. " + "; ".join(details),
        },
    )


async def recipe_error_handler(request: Request, exc: RecipeServiceError):
    path = request.url.path if request is not None else None
    if isinstance(exc, InferenceError):
        logger.error("%s on %s: %s (transient=%s)", exc.error, path, exc.message, exc.transient)
    else:
        logger.error("%s on %s: %s", exc.error, path, exc.message)

    content = {"error": exc.error, "message": exc.message}
    if not get_settings().is_production and exc.__cause__ is not None:
        content["detail"] = repr(exc.__cause__)
    return JSONResponse(status_code=exc.status_code, content=content)


async def unhandled_error_handler(request: Request, exc: Exception):
    path = request.url.path if request is not None else None
    logger.exception("Unhandled error on %s: %s", path, exc)
    content = {"error": "InternalError", "message": "An unexpected error occurred"}
    if not get_settings().is_production:
        content["detail"] = repr(exc)
    return JSONResponse(status_code=500, content=content)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Mealman", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RecipeServiceError, recipe_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.include_router(api_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
