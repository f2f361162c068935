from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from app.core.config import settings
from app.api import bookings, static
from app.core.errors import BookingError, PayloadTooLarge, StorageError
from app.core.logger import setup_logging, logger
from contextlib import asynccontextmanager

setup_logging()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"🚀 Starting {settings.PROJECT_NAME} on port {settings.PORT}")
    yield
    # Shutdown
    logger.info("🛑 Shutting down backend")

app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan
)

@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    if isinstance(exc, StorageError):
        logger.error(f"❌ {request.method} {request.url.path} failed: {exc.detail}")
    else:
        logger.warning(f"⚠️ {request.method} {request.url.path} rejected: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

@app.exception_handler(PayloadTooLarge)
async def payload_too_large_handler(request: Request, exc: PayloadTooLarge):
    # No error document, just drop the client
    logger.warning(f"⚠️ {request.method} {request.url.path}: {exc}, closing connection")
    return Response(status_code=413, headers={"Connection": "close"})

# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.opt(exception=exc).error(f"🔥 UNHANDLED ERROR: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content={"error": "internal server error"}
    )

# Include routers; static must come last, it matches every path
app.include_router(bookings.router, prefix=settings.API_PREFIX, tags=["Bookings"])
app.include_router(static.router, tags=["Static"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.PORT)
