import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.database import SessionLocal, engine, get_settings
from app.models import models
from app.routers import agent, auth, chat, images, knowledge, marketplace, projects, providers, skills, tasks
from app.streaming.upstream import build_timeout
from app.utils.errors import register_exception_handlers
from app.utils.seed import seed_database

logging.basicConfig(
    level=get_settings().LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logging.getLogger('passlib').setLevel(logging.ERROR)
logging.getLogger('httpx').setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    models.Base.metadata.create_all(engine)
    db = SessionLocal()
    try:
        seed_database(db)
    finally:
        db.close()

    app.state.http_client = httpx.AsyncClient(timeout=build_timeout())
    logger.info("Falcon Core API started")
    yield
    await app.state.http_client.aclose()


app = FastAPI(title="Falcon Core AI", lifespan=lifespan)
origins = [origin.strip() for origin in get_settings().CORS_ORIGINS.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


app.include_router(auth.router)
app.include_router(chat.router)
app.include_router(images.router)
app.include_router(agent.router)
app.include_router(tasks.router)
app.include_router(knowledge.router)
app.include_router(projects.router)
app.include_router(providers.router)
app.include_router(skills.router)
app.include_router(marketplace.router)
