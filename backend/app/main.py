import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from synapse.verification.store import InMemoryStore

from backend.app.config import AppConfig
from backend.app.api.routes_users import router as users_router
from backend.app.api.routes_graph import router as graph_router
from backend.app.api.routes_history import router as history_router
from backend.app.db.database import init_db
from backend.app.dependencies import get_config, get_engine, get_store
from backend.app.errors import register_error_handlers

logger = logging.getLogger("synapse.startup")


async def _sweep_forever(store: InMemoryStore, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        store.sweep()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifecycle hooks.

    Creates the tables once at startup and, for the in-process
    verification store, runs the periodic expiry sweep.
    """
    init_db(get_engine())
    logger.info("[startup] database ready")

    sweeper = None
    store = get_store()
    if isinstance(store, InMemoryStore):
        interval = get_config().synapse.verification.sweep_interval_seconds
        sweeper = asyncio.create_task(_sweep_forever(store, interval))

    yield

    if sweeper is not None:
        sweeper.cancel()
        with suppress(asyncio.CancelledError):
            await sweeper


def create_app(config: AppConfig) -> FastAPI:
    app = FastAPI(
        title=config.app_name,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.include_router(
        users_router,
        prefix=f"{config.api_prefix}/users",
        tags=["users"],
    )

    app.include_router(
        graph_router,
        prefix=f"{config.api_prefix}/graph",
        tags=["graph"],
    )

    app.include_router(
        history_router,
        prefix=f"{config.api_prefix}/history",
        tags=["history"],
    )

    @app.get("/")
    def health():
        return {"status": "ok", "message": "Synapse backend is running"}

    return app


config = AppConfig()
app = create_app(config)
