from .queries import ClubQueries
from .routes import configure_club_router

__all__ = ["ClubQueries", "configure_club_router"]
