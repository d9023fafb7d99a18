import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from linkstats_app.config import settings
from linkstats_app.exceptions import RouteNotFoundError, ShortLinkError
from linkstats_app.api.v1 import analytics, links, redirect

# --- Logging ---
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
)
logger = logging.getLogger("linkstats")

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="A URL shortener with click analytics built with FastAPI",
    debug=settings.debug,
    redirect_slashes=False  # "/promo1/" is an unknown slug, not "/promo1"
)


######## Error handling

def _error_response(exc: ShortLinkError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(ShortLinkError)
async def shortlink_error_handler(request: Request, exc: ShortLinkError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are client errors (400), not FastAPI's default 422"""
    return JSONResponse(status_code=400, content={"detail": "Invalid request body"})


@app.exception_handler(StarletteHTTPException)
async def route_error_handler(request: Request, exc: StarletteHTTPException):
    # Unknown method/path combinations are all plain 404s
    if exc.status_code in (404, 405):
        return _error_response(RouteNotFoundError())
    return await http_exception_handler(request, exc)


@app.get("/")
def read_root():
    """Root endpoint with API information"""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "environment": settings.environment,
        "storeBackend": settings.entity_store_backend,
    }


######## Include routers (redirect last: it catches every single-segment path)
app.include_router(links.router, prefix=settings.api_prefix)
app.include_router(analytics.router, prefix=settings.api_prefix)
app.include_router(redirect.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.host, port=settings.port, reload=settings.debug)
