import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from readgate.routes import material_progress, materials
from readgate.db.base import Base
from readgate.db.sessions import engine
from readgate.core.config import settings
from readgate.core.errors import ReadGateError, readgate_error_handler

# Import all models to ensure they're registered with Base
import readgate.models

logger = logging.getLogger(__name__)

# Create tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Timed page gating for course study materials"
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(ReadGateError, readgate_error_handler)

# Register routers
app.include_router(material_progress.router)
app.include_router(materials.router)


@app.on_event("startup")
async def startup_event():
    logger.info("%s v%s starting", settings.APP_NAME, settings.APP_VERSION)
    logger.info("Page dwell window: %ss..%ss, checkpoint every %ss",
                settings.MIN_TIME_SECONDS, settings.MAX_TIME_SECONDS, settings.CHECKPOINT_INTERVAL_SECONDS)


@app.get("/health")
def health():
    return {"status": "ok"}
