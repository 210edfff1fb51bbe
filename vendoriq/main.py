from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from vendoriq.api import auth, files, industries, payments, requests
from vendoriq.core.config import settings
from vendoriq.core.redis import RedisClient
from vendoriq.health import add_health_endpoint
from vendoriq.services.otp_service import build_otp_manager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.cache = RedisClient(settings.REDIS_URL)
    app.state.otp_manager = build_otp_manager(app.state.cache)
    logger.info(f"🚀 {settings.PROJECT_NAME} API started (OTP store: {app.state.otp_manager.backend})")
    try:
        yield
    finally:
        app.state.otp_manager.close()
        app.state.cache.close()
        logger.info("🛑 Shutting down gracefully")


app = FastAPI(
    title=f"{settings.PROJECT_NAME} API",
    description="Marketplace for businesses to post and answer service requests",
    version="1.0.0",
    lifespan=lifespan,
)

add_health_endpoint(app)

app.include_router(auth.router, prefix=settings.API_V1_STR)
app.include_router(industries.router, prefix=settings.API_V1_STR)
app.include_router(requests.router, prefix=settings.API_V1_STR)
app.include_router(payments.router, prefix=settings.API_V1_STR)
app.include_router(files.router, prefix=settings.API_V1_STR)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
