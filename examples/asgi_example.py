"""Example running the bare ASGI exporter without FastAPI.

Run with:
    uvicorn examples.asgi_example:app --port 9404

The collector points at a registry on localhost:8761 and two peers.
"""

from eureka_exporter.adapters.collector import EurekaCollector
from eureka_exporter.adapters.frameworks.asgi import create_asgi_app
from eureka_exporter.core.config import load_config

config = load_config(
    {
        "server": {"port": 8761},
        "metric": {
            "eureka": {
                "enabled": True,
                "clusterName": "local",
                "cluster": ["localhost:8762", "localhost:8763"],
            }
        },
    }
)

app = create_asgi_app(EurekaCollector(config))
