# app/main.py
from __future__ import annotations

from fastapi import APIRouter, FastAPI
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response as StarletteResponse

from api.routers.market_news import router as market_news_router
from app.core.config import get_settings
from app.core.logging import configure_logging, get_logger
from app.core.request_id import clear_request_id, new_request_id, set_request_id

settings = get_settings()
configure_logging(service_name="market-news-api", level=settings.LOG_LEVEL)
logger = get_logger()

app = FastAPI(
    title="Market News Aggregator",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)


def _internal_error_response(exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "message": str(exc)},
    )


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        req_id = request.headers.get("x-request-id") or new_request_id()
        set_request_id(req_id)
        logger.info("request_started", method=request.method, path=str(request.url.path))
        try:
            try:
                response: StarletteResponse = await call_next(request)
            except Exception as exc:
                # the outer ServerErrorMiddleware would answer without our header
                logger.exception("unhandled_exception", path=str(request.url.path))
                response = _internal_error_response(exc)
            logger.info("request_ended", status_code=response.status_code)
            response.headers["X-Request-Id"] = req_id
            return response
        finally:
            clear_request_id()


app.add_middleware(RequestIdMiddleware)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", path=str(request.url.path))
    return _internal_error_response(exc)


# --- Health endpoints ---
@app.get("/healthz")
async def healthz():
    return {"status": "healthy"}

@app.get("/health")
async def health():
    return {"ok": True}


api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(market_news_router)
app.include_router(api_v1_router)
