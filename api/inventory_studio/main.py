# inventory_studio/main.py
# Inventory Studio - custom inventories, typed fields, composable custom IDs
from __future__ import annotations
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from inventory_studio.settings import settings
from inventory_studio.logging_setup import setup_logging
from inventory_studio.database import init_db, close_db, create_all, check_db_health
from inventory_studio.errors import InventoryStudioError
from inventory_studio.routers.inventories import router as inventories_router
from inventory_studio.routers.items import router as items_router

APP_VERSION = "1.0.0"

logger = logging.getLogger("inventory_studio")

# ---------------------------------------------------------
# Lifespan: logging + database init/cleanup
# ---------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    log_path = setup_logging(settings)
    await init_db()
    if settings.DB_CREATE_ALL:
        await create_all()
    logger.info("Inventory Studio %s started (log: %s)", APP_VERSION, log_path)
    yield
    await close_db()
    logger.info("Inventory Studio stopped")

# ---------------------------------------------------------
# FastAPI app + CORS
# ---------------------------------------------------------
app = FastAPI(
    title="Inventory Studio API",
    version=APP_VERSION,
    description="Custom inventories with typed fields, composable item IDs and optimistic locking",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(inventories_router)
app.include_router(items_router)

# ---------------------------------------------------------
# Error mapping
# ---------------------------------------------------------
@app.exception_handler(InventoryStudioError)
async def domain_error_handler(request: Request, exc: InventoryStudioError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error in %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})

# ---------------------------------------------------------
# Endpoints
# ---------------------------------------------------------
@app.get("/health")
async def health():
    """Health check endpoint with database status."""
    result = {
        "status": "ok",
        "version": APP_VERSION,
    }
    db_health = await check_db_health()
    result["database"] = db_health
    if db_health.get("status") != "healthy":
        result["status"] = "degraded"
    return result


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("inventory_studio.main:app", host="127.0.0.1", port=8000, reload=True)
