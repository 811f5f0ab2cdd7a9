"""Product service dependency."""

from fastapi import Request

from catalog.core.config import Settings
from catalog.services.product_service import ProductService


def get_product_service(request: Request) -> ProductService:
    """FastAPI dependency returning the service wired at startup."""
    return request.app.state.product_service


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was created with."""
    return request.app.state.settings
