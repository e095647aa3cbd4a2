from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session
from gso_library.api.errors import register_exception_handlers
from gso_library.api.v1.router import api_router
from gso_library.core.config import settings
from gso_library.core.logging import configure_logging
from gso_library.db.init_db import init_db
from gso_library.db.seed import seed_users
from gso_library.db.session import engine
from gso_library.services.token_service import verify_signing_key

configure_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(_: FastAPI):
    verify_signing_key()
    init_db()
    if settings.SEED_USERS_FILE:
        with Session(engine) as session:
            seed_users(session, Path(settings.SEED_USERS_FILE).expanduser())
    yield

app = FastAPI(title=settings.PROJECT_NAME, debug=settings.DEBUG, lifespan=lifespan)

allow_origins = settings.CORS_ORIGINS
allow_credentials = '*' not in allow_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=allow_credentials,
    allow_methods=['*'],
    allow_headers=['*'],
)

register_exception_handlers(app)
app.include_router(api_router)
