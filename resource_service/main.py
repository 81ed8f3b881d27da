import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
from resource_service import config
from resource_service.error_handlers import register_error_handlers
from resource_service.initial_data import init_demo_data
from resource_service.routers import catalog, health, resources
from resource_service.services.dispatch_service import build_dispatcher

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup logic
    logger.info("Application startup: building route table for %s", ", ".join(config.RESOURCE_TYPES))
    app.state.dispatcher = build_dispatcher(config.RESOURCE_TYPES)

    if config.SEED_DEMO_DATA:
        init_demo_data(app.state.dispatcher)

    yield

    logger.info("Application shutdown.")


app = FastAPI(root_path=config.API_ROOT_PATH, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(health.router)
app.include_router(catalog.router)
# Catch-all, must stay last
app.include_router(resources.router)
