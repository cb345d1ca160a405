"""Sanitation Checklist Web Application."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from sqlmodel import Session

from app.assignments.catalog import sync_checklists
from app.core.config import settings
from app.core.database import create_db_and_tables, engine
from app.core.scheduler import shutdown_scheduler, start_scheduler
from app.routes import admin, assignments, auth, checklists, submissions

# Configure logging
log_dir = Path.home() / ".logs" / "sanitation"
log_dir.mkdir(parents=True, exist_ok=True)
log_file = log_dir / "latest.log"

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    filename=str(log_file),
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application startup and shutdown lifecycle.

    Creates tables and the submission directory, registers any new
    checklist forms, and runs the reset token purge job while serving.
    """
    logger.info("Starting Sanitation Checklist application")
    create_db_and_tables()
    Path(settings.data_dir).mkdir(parents=True, exist_ok=True)
    with Session(engine) as session:
        sync_checklists(session, settings.checklists_dir)
    start_scheduler()
    yield
    shutdown_scheduler()
    logger.info("Sanitation Checklist application shut down")


app = FastAPI(
    title=settings.app_name,
    description="Rotates sanitation checklists between warehouse staff and collects supervisor validation",
    version="0.1.0",
    lifespan=lifespan,
)

origins = (
    ["*"]
    if settings.allowed_origins == "*"
    else [o.strip() for o in settings.allowed_origins.split(",")]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(assignments.router)
app.include_router(checklists.router)
app.include_router(submissions.router)
app.include_router(admin.router)


@app.get("/")
async def root(request: Request):
    """Send browsers to the interactive API docs."""
    rp = request.scope.get("root_path", "")
    return RedirectResponse(f"{rp}/docs")


@app.get("/health")
async def health():
    return {"status": "healthy", "app": settings.app_name}


if __name__ == "__main__":
    uvicorn.run("app.main:app", host=settings.host, port=settings.port, reload=settings.debug)
