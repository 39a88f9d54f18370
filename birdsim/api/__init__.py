"""HTTP layer: FastAPI app, routes and schemas."""
