"""FastAPI sidecar for photo moment grouping.

Provides REST API endpoints for:
- Grouping detected photos into time-bounded moments
- Chaining moments in which the same face recurs
- Exporting the result as a group-info document
"""
import logging

from dotenv import load_dotenv
load_dotenv()

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from grouping_router import router as grouping_router, init_grouping_router, get_grouping_config
from photo_grouping import GroupingConfig
from service_config import ServiceConfig

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


class HealthResponse(BaseModel):
    status: str
    version: str
    grouping: dict


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load grouping thresholds from the environment on startup."""
    service_config = ServiceConfig.from_env()
    logging.getLogger().setLevel(service_config.log_level)

    try:
        grouping_config = GroupingConfig.from_env()
    except ValueError as e:
        logger.warning(f"Invalid grouping configuration, using defaults: {e}")
        grouping_config = GroupingConfig()

    init_grouping_router(grouping_config)
    logger.warning(f"Grouping initialized: {grouping_config.to_dict()}")

    yield


app = FastAPI(
    title="Photo Moments API",
    description="Groups photos into moments and chains recurring faces",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(grouping_router)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Check API health and report the active grouping thresholds."""
    return HealthResponse(
        status="healthy",
        version=VERSION,
        grouping=get_grouping_config().to_dict(),
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=5000)
