"""Presentation layer: FastAPI routers and error responses."""
