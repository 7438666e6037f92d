import time
from typing import Callable, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from sqlalchemy import text
from sqlalchemy.orm import Session

from formdesk.core.config.logging_config import setup_logging
from formdesk.core.config.settings import get_settings
from formdesk.db.base import Base
from formdesk.db.init_db import init_db
from formdesk.db.session import SessionLocal, engine, get_db
from formdesk.routers import auth, forms, responses

settings = get_settings()
logger = setup_logging(settings)

RATE_LIMIT_WINDOW_SECONDS = 60

app = FastAPI(
    title=settings.PROJECT_NAME,
    debug=settings.DEBUG,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    docs_url=f"{settings.API_PREFIX}/docs",
    redoc_url=f"{settings.API_PREFIX}/redoc",
)

# Set on startup when REDIS_URL is configured and reachable
redis: Optional[Redis] = None

async def connect_redis(url: str) -> Optional[Redis]:
    client = Redis.from_url(url, encoding="utf-8", decode_responses=True)
    try:
        await client.ping()
    except Exception as e:
        logger.error(f"Redis unavailable at startup, rate limiting disabled: {e}")
        return None
    logger.info("Redis connected, rate limiting enabled")
    return client

def seed_database():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        init_db(db)
    except Exception as e:
        logger.error(f"Seeding the database failed: {e}")
    finally:
        db.close()

async def count_request(client_ip: str) -> int:
    key = f"rate_limit:{client_ip}"
    hits = await redis.incr(key)
    if hits == 1:
        await redis.expire(key, RATE_LIMIT_WINDOW_SECONDS)
    return hits

@app.on_event("startup")
async def on_startup():
    global redis
    if settings.REDIS_URL:
        redis = await connect_redis(settings.REDIS_URL)
    seed_database()
    logger.info("Formdesk API started")

@app.on_event("shutdown")
async def on_shutdown():
    if redis is not None:
        await redis.close()

@app.middleware("http")
async def log_requests(request: Request, call_next: Callable):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} in {elapsed_ms:.0f}ms")
    return response

@app.middleware("http")
async def rate_limit(request: Request, call_next: Callable):
    if redis is None or request.client is None:
        return await call_next(request)

    try:
        hits = await count_request(request.client.host)
    except Exception as e:
        # Requests are served unthrottled while Redis is down
        logger.error(f"Rate limit check skipped for {request.client.host}: {e}")
        return await call_next(request)

    if hits > settings.RATE_LIMIT_PER_MINUTE:
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"detail": "Too many requests"},
        )
    return await call_next(request)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in (auth.router, forms.router, responses.router):
    app.include_router(router, prefix=settings.API_PREFIX)

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    logger.warning(f"{request.method} {request.url.path} failed with {exc.status_code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )

@app.get("/health")
async def health_check(db: Session = Depends(get_db)):
    report = {
        "status": "healthy",
        "timestamp": time.time(),
        "database": "connected",
        "redis": "not configured" if redis is None else "connected",
    }

    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check could not reach the database: {e}")
        report["database"] = "disconnected"
        report["status"] = "unhealthy"

    if redis is not None:
        try:
            await redis.ping()
        except Exception as e:
            logger.error(f"Health check could not reach Redis: {e}")
            report["redis"] = "disconnected"
            report["status"] = "unhealthy"

    return report
