# cartboard/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .errors import CartboardError
from .routes import catalog, entry
from .routes import orders as orders_router
from .settings import settings
from .state import build_state

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Cartboard Workshop Orders API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(orders_router.router)
app.include_router(entry.router)
app.include_router(catalog.router)


@app.get("/")
def root():
    return {"message": "Cartboard API is running"}


@app.on_event("startup")
def _startup_load_state():
    state = build_state()
    try:
        state.load()
    except CartboardError as e:
        # Don't crash; the first request will try again lazily
        logger.error("[startup] could not load orders/catalog (will retry lazily): %s", e)
        return
    app.state.workshop = state
    logger.info("[startup] workshop state ready.")


@app.on_event("shutdown")
def _shutdown_close_state():
    state = getattr(app.state, "workshop", None)
    if state is not None:
        state.close()
