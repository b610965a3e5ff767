"""FastAPI routers for the relay HTTP API."""
