"""API route registration."""

from fastapi import FastAPI

from src.api.routes import cart, collections, products, revalidate, system


def include_api_routes(app: FastAPI) -> None:
    """Attach all API routers to the application."""

    app.include_router(system.router)
    app.include_router(collections.router)
    app.include_router(products.router)
    app.include_router(cart.router)
    app.include_router(revalidate.router)
