'''
Application entrypoint. Run with `uvicorn peer_tutoring_backend.main:app`.
'''
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .database import engine as db_engine
from .common.logger import log
from .common.config import settings
from .services.subject_service import SubjectService
from .api import timeslots, subjects, requests, users


async def _seed_subjects():
    async with db_engine.AsyncSessionLocal() as session:
        subject_service = SubjectService(session)
        if not await subject_service.has_subjects():
            await subject_service.seed_default_subjects()
            await session.commit()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handles application startup and shutdown events.
    """
    # --- On App Startup ---
    log.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}...")
    db_engine.create_db_engine_and_session_factory()
    if settings.database_url.startswith("sqlite"):
        await db_engine.create_all_tables()
    if settings.SEED_SUBJECTS_ON_STARTUP:
        await _seed_subjects()

    yield # --- Application is now running ---

    # --- On App Shutdown ---
    if not settings.TEST_MODE:
        log.info("Application lifespan shutdown...")
        await db_engine.dispose_db_engine()
    else:
        log.info("Skipping database engine disposal in TEST_MODE.")


# ---- CREATING THE APP ----
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    lifespan=lifespan
)

# --- Add CORS Middleware ---
origins = [
    "http://localhost",
    "http://localhost:3000",
]
origins.extend(settings.BACKEND_CORS_ORIGINS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],)
# --- End of CORS Middleware ---

@app.get("/")
async def health_check():
    return {"status": "ok", "message": f"{settings.APP_NAME} is running"}

app.include_router(timeslots.router)
app.include_router(subjects.router)
app.include_router(requests.router)
app.include_router(users.router)
