"""Server — FastAPI app creation, middleware, startup."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from server.config import ALLOWED_ORIGINS, LOG_LEVEL
from server.container import build_planner
from server.errors import register_error_handlers

from auth.routes import router as auth_router
from tasks.routes import router as tasks_router
from exams.routes import router as exams_router
from syllabus.routes import router as syllabus_router
from planner.routes import router as planner_router
from brain.routes import router as brain_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup; tests may install their own planner beforehand.
    if getattr(app.state, "planner", None) is None:
        app.state.planner = build_planner()
    logger.info("Study planner started")
    yield
    # Shutdown
    app.state.planner.close()
    logger.info("Study planner stopped")


def create_app() -> FastAPI:
    app = FastAPI(title="Study Planner API", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=ALLOWED_ORIGINS != ["*"],
    )
    register_error_handlers(app)

    # ─── API routes ──────────────────────────────────────────
    app.include_router(auth_router, prefix="/auth", tags=["auth"])
    app.include_router(tasks_router, tags=["tasks"])
    app.include_router(exams_router, tags=["tests"])
    app.include_router(syllabus_router, tags=["syllabus"])
    app.include_router(planner_router, tags=["planner"])
    app.include_router(brain_router, tags=["brain"])

    @app.get("/health")
    def health_check():
        return {"status": "ok", "version": "1.0.0"}

    return app


app = create_app()
