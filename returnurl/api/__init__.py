"""HTTP surface: request/response models and routes."""
from .routes import router

__all__ = ["router"]
