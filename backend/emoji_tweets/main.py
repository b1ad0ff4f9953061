import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routers import posts
from .core.config import settings
from .core.errors import EmojiTweetsError
from .core.logging import configure_logging, set_request_id
from .db import models  # noqa: F401  registers tables on Base.metadata
from .db.base import Base
from .db.session import engine

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Emoji Tweets API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

router_modules = [
    posts.router,
]

for router in router_modules:
    app.include_router(router)


@app.middleware("http")
async def assign_request_id(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    set_request_id(request_id)
    try:
        response = await call_next(request)
    finally:
        set_request_id(None)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(EmojiTweetsError)
async def handle_service_error(request: Request, exc: EmojiTweetsError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc, exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers or None)


@app.get("/")
async def root() -> dict:
    return {"message": "Emoji Tweets API is ready"}


@app.on_event("startup")
async def on_startup() -> None:
    Base.metadata.create_all(bind=engine)
