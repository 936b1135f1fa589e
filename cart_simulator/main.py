"""
Cart Simulator API

HTTP front end for the shopping cart simulator: catalog, carts, coupons,
shipping quotes and checkout over the same stores the terminal menu uses.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from .core.config import get_settings
from .core.context import AppContext, build_context
from .core.logs import setup_logging
from .routes import (
    products_router,
    cart_router,
    coupons_router,
    shipping_router,
    checkout_router,
)

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        context: Pre-built stores and services; when omitted they are built
            from the environment settings at startup
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events"""
        if getattr(app.state, "context", None) is None:
            app.state.context = build_context(get_settings())
        settings = app.state.context.settings
        logger.info(f"{settings.app_name} starting up...")
        logger.info(f"Data directory: {settings.data_path.resolve()}")
        yield
        logger.info(f"{settings.app_name} shutting down...")

    settings = context.settings if context else get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Shopping cart simulator with coupons, shipping quotes and checkout",
        version="1.0.0",
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(products_router)
    app.include_router(cart_router)
    app.include_router(coupons_router)
    app.include_router(shipping_router)
    app.include_router(checkout_router)

    @app.get("/")
    async def home():
        return {
            "message": f"{settings.app_name} API",
            "docs": "/docs",
            "endpoints": {
                "products": "/api/products",
                "cart": "/api/cart",
                "coupons": "/api/coupons",
                "shipping": "/api/shipping",
                "checkout": "/api/checkout",
            },
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "service": "cart-simulator"}

    return app


app = create_app()


def run() -> None:
    """Serve the API with uvicorn"""
    import uvicorn

    settings = get_settings()
    setup_logging(settings)
    uvicorn.run(
        "cart_simulator.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
