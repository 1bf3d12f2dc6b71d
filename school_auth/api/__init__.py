"""HTTP API (FastAPI routers and dependency wiring)."""
