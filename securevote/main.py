# main.py
import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pymongo.errors import PyMongoError

from securevote import config
from securevote.consistency import ensure_data_consistency, run_periodic_consistency
from securevote.database.connection import ElectionStore
from securevote.routes.candidate_routes import router as candidate_router
from securevote.routes.election_routes import router as election_router
from securevote.routes.vote_routes import vote_router
from securevote.schemas import HealthStatus

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

# Reachable while the database is down
OPEN_PATHS = {"/", "/api", "/api/health", "/docs", "/redoc", "/openapi.json", "/favicon.ico"}

API_ENDPOINTS = [
    "/api/health",
    "/api/election",
    "/api/candidates",
    "/api/vote",
    "/api/stats",
    "/api/settings",
    "/api/universities",
]


# ==============================================================================
# SECTION 1: STARTUP & SHUTDOWN
# ==============================================================================

def _prepare_store(store: ElectionStore, seed_defaults: bool):
    if seed_defaults:
        store.seed_defaults()
    ensure_data_consistency(store)


def create_app(
    store: ElectionStore = None,
    seed_defaults: bool = None,
    consistency_interval: int = None,
) -> FastAPI:
    """
    Build the election API.

    Args:
        store: Store handle to serve from; when None a MongoDB connection is
            opened on startup and the app runs degraded if it fails
        seed_defaults: Insert default settings, voter stats and demo candidates
        consistency_interval: Seconds between background consistency sweeps;
            0 disables them
    """
    if seed_defaults is None:
        seed_defaults = config.SEED_DEFAULT_DATA
    if consistency_interval is None:
        consistency_interval = config.CONSISTENCY_INTERVAL_SECONDS

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_store = False
        if app.state.store is None:
            try:
                app.state.store = await asyncio.to_thread(ElectionStore.connect)
                owns_store = True
            except PyMongoError as e:
                logger.error(f"MongoDB connection error, starting degraded: {e}")

        sweeper = None
        if app.state.store is not None:
            try:
                await asyncio.to_thread(_prepare_store, app.state.store, seed_defaults)
            except PyMongoError as e:
                logger.error(f"Error preparing election data: {e}")
            if consistency_interval > 0:
                sweeper = asyncio.create_task(
                    run_periodic_consistency(app.state.store, consistency_interval)
                )

        yield

        if sweeper is not None:
            sweeper.cancel()
            with suppress(asyncio.CancelledError):
                await sweeper
        if owns_store:
            app.state.store.close()
            app.state.store = None

    app = FastAPI(title="SecureVote - University Election API", version="1.0.0", lifespan=lifespan)
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.middleware("http")
    async def require_database(request: Request, call_next):
        if request.app.state.store is None and request.url.path not in OPEN_PATHS:
            logger.error(f"Database not connected, rejecting request to {request.url.path}")
            return JSONResponse(
                status_code=503,
                content={
                    "error": "Service Unavailable",
                    "message": "Database connection is not established. Please try again later.",
                },
            )
        return await call_next(request)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"[{request.method}] {request.url.path}")
        return await call_next(request)

    @app.exception_handler(PyMongoError)
    async def database_error_handler(request: Request, exc: PyMongoError):
        logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=503,
            content={"error": "Database Error", "message": "The database operation failed. Please try again later."},
        )

    app.include_router(candidate_router)
    app.include_router(election_router)
    app.include_router(vote_router)

    # ==========================================================================
    # SECTION 2: GENERAL ENDPOINTS
    # ==========================================================================

    @app.get("/", tags=["Root"])
    def read_root():
        return {
            "status": "OK",
            "message": "Secure Vote API is running",
            "version": app.version,
            "endpoints": "/api/*",
        }

    @app.get("/api", tags=["Root"])
    def api_index():
        return {"status": "OK", "message": "API is ready", "endpoints": API_ENDPOINTS}

    @app.get("/api/health", response_model=HealthStatus, tags=["Root"])
    def health_check(request: Request):
        store = request.app.state.store
        database = "connected" if store is not None and store.ping() else "disconnected"
        logger.info(f"Health check: Database {database}")
        return {
            "status": "OK",
            "message": "Server is running",
            "database": database,
            "timestamp": datetime.now(timezone.utc),
        }

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon():
        return Response(status_code=204)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
