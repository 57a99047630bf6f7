"""FastAPI application for cluster spec assignment."""

import logging

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI

from cloudup.routes.assignments import router as assignments_router
from cloudup.settings import get_settings

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="cloudup",
    description="Fills in the defaults of a partially specified cluster spec: "
    "network CIDRs, topology, Kubernetes version and proxy exclusions.",
    version="1.0.0",
)

app.include_router(assignments_router)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
