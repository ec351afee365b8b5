from .queries import CompetitionQueries
from .routes import configure_competition_router

__all__ = ["CompetitionQueries", "configure_competition_router"]
