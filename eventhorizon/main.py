import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eventhorizon.core import config
from eventhorizon.core.error_handlers import register_error_handlers
from eventhorizon.core.logging_config import setup_logging
from eventhorizon.database.db import init_db
from eventhorizon.routes import accounts, events, health, registrations, reports

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(config.LOG_LEVEL)
    init_db()
    logger.info("EventHorizon API started")
    yield
    logger.info("EventHorizon API shutting down")


app = FastAPI(title="EventHorizon API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Include the routers
app.include_router(health.router)
app.include_router(accounts.router)
app.include_router(events.router)
app.include_router(registrations.router)
app.include_router(reports.router)
