import asyncio
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.core.rate_limit import limiter
from app.modules.auth import routes as auth_routes
from app.modules.profiles import routes as profiles_routes
from app.modules.rooms import routes as rooms_routes
from app.modules.messages import routes as messages_routes
from app.modules.friends import routes as friends_routes
from app.modules.notifications import routes as notifications_routes
from app.modules.tapins import routes as tapins_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(
        status_code=400,
        content={"error": message, "details": jsonable_encoder(errors)},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
    return JSONResponse(status_code=500, content={"error": str(exc)})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"Referrer-Policy", b"no-referrer"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SlowAPIMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include module routes
app.include_router(auth_routes.router)
app.include_router(profiles_routes.router)
app.include_router(rooms_routes.router)
app.include_router(messages_routes.room_messages_router)
app.include_router(messages_routes.router)
app.include_router(friends_routes.router)
app.include_router(friends_routes.friend_requests_router)
app.include_router(notifications_routes.router)
app.include_router(notifications_routes.push_tokens_router)
app.include_router(tapins_routes.router)


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup")

    if settings.room_reaper_enabled:
        from app.modules.rooms.expiry_scheduler import room_reaper_loop
        app.state.room_reaper = asyncio.create_task(room_reaper_loop())
        logger.info(f"Room reaper started - purging expired rooms every {settings.room_reaper_interval_seconds}s")


@app.on_event("shutdown")
async def shutdown_event():
    reaper = getattr(app.state, "room_reaper", None)
    if reaper:
        reaper.cancel()
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": "Welcome to tapin-backend", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness probe"""
    return {"status": "ready"}
