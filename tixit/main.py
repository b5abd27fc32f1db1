from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from tixit.core.config import settings
from tixit.core.observability import setup_logging
from tixit.core.rate_limit import limiter_from_settings
from tixit.api.api import api_router
from tixit.api.error_handlers import register_error_handlers
from tixit.api.middleware import SecurityHeadersMiddleware

setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

app = FastAPI(title=settings.APP_NAME)
app.state.rate_limiter = limiter_from_settings(settings)

# CORS: use CORS_ORIGINS from env in production; default to the client app + localhost for dev
_default_origins = [
    settings.CLIENT_BASE_URL.rstrip("/"),
    "http://127.0.0.1:3000", "http://localhost:3000",
    "http://127.0.0.1:5173", "http://localhost:5173",
]
_origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()] if settings.CORS_ORIGINS else _default_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)
app.add_middleware(SecurityHeadersMiddleware, hsts=settings.ENV != "local")

register_error_handlers(app)
app.include_router(api_router)


@app.get("/", response_class=PlainTextResponse)
def root():
    return "TixIt backend is running!"


@app.get("/health")
def health():
    return {"status": "ok"}
