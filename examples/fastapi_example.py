"""Example FastAPI application exposing registry metrics.

Run with:
    EUREKA_EXPORTER_CONFIG=tests/fixtures/application.yml \
        uvicorn examples.fastapi_example:app --port 9404

Endpoints:
    /metrics  - Prometheus text format, scraped fresh on every request
    /         - Short description of the exporter
"""

import logging
import os

from fastapi import FastAPI

from eureka_exporter.adapters.collector import EurekaCollector
from eureka_exporter.adapters.frameworks.fastapi import create_metrics_router
from eureka_exporter.core.config import load_config_file

logging.basicConfig(level=logging.INFO)

config = load_config_file(
    os.environ.get("EUREKA_EXPORTER_CONFIG", "tests/fixtures/application.yml")
)

# Create FastAPI app
app = FastAPI(title="Eureka Exporter Example")

# Mount the scrape endpoint
app.include_router(create_metrics_router(EurekaCollector(config)))


@app.get("/")
async def root() -> dict[str, str]:
    """Describe what the exporter is watching."""
    members = ", ".join(member.address for member in config.cluster) or "none"
    return {
        "registry": config.apps_url,
        "cluster": config.cluster_name,
        "members": members,
    }
