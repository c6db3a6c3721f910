"""
FastAPI application entry point for the media relay service.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import get_settings
from .api.routes import router
from .api.schemas import ErrorResponse


settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup / shutdown hooks."""
    logging.getLogger(__name__).info(
        "Media relay starting up on http://%s:%d ...", settings.app_host, settings.port,
    )
    yield
    logging.getLogger(__name__).info("Media relay shutting down ...")


app = FastAPI(
    title="Media Relay",
    description="Renders brat images and fetches YouTube audio, "
                "re-hosting the results on a public file host.",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(router)


@app.exception_handler(StarletteHTTPException)
async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    """Methods the router does not register at all still get the JSON 405 body."""
    if exc.status_code == 405:
        body = ErrorResponse(message="Method Not Allowed")
        return JSONResponse(status_code=405, content=body.model_dump(), headers=exc.headers)
    return await http_exception_handler(request, exc)


def run() -> None:
    uvicorn.run(
        "mediarelay.main:app",
        host=settings.app_host,
        port=settings.port,
        reload=False,
    )


if __name__ == "__main__":
    run()
