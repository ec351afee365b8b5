from .routes import configure_user_router

__all__ = ["configure_user_router"]
