import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi

from price_alerts.core.config import settings
from price_alerts.core.database import Base, engine
from price_alerts.core.exceptions import (
    RateLimited,
    rate_limited_handler,
    request_validation_handler,
)
from price_alerts.core.rate_limit import RateLimitMiddleware, global_limiter
from price_alerts.core.scheduler import schedule_alert_checks, scheduler
from price_alerts.modules.auth.router import router as router_auth
from price_alerts.modules.notify.router import router as router_alerts
from price_alerts.modules.stats.router import router as router_stats
from price_alerts.modules.stats.service import drain_pending
from price_alerts.modules.stocks.router import router as router_stocks


logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

PUBLIC_PATHS = {"/", "/auth/register", "/auth/login", "/auth/refresh"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    schedule_alert_checks()
    scheduler.start()
    logger.info("Alert checker scheduled (minute=%s)", settings.ALERT_CHECK_MINUTES)

    yield

    scheduler.shutdown()
    await drain_pending()
    await engine.dispose()


app = FastAPI(lifespan=lifespan)


app.add_middleware(RateLimitMiddleware, limiter=global_limiter)
# outermost: 429s and preflights get CORS headers
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(RateLimited, rate_limited_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)


def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title="Price Alerts API",
        version="1.0.0",
        description="Stock quotes, price alerts and usage stats",
        routes=app.routes,
    )
    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
        }
    }
    for path, operations in openapi_schema["paths"].items():
        if path in PUBLIC_PATHS:
            continue
        for operation in operations.values():
            operation.setdefault("security", []).append({"BearerAuth": []})
    app.openapi_schema = openapi_schema
    return openapi_schema


app.openapi = custom_openapi


@app.get("/")
async def root():
    return {"message": "Server is running"}


app.include_router(router_auth)
app.include_router(router_stocks)
app.include_router(router_alerts)
app.include_router(router_stats)


def run():
    uvicorn.run("price_alerts.main:app", host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
