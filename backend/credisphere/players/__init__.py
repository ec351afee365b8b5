from .queries import PlayerQueries
from .routes import configure_player_router

__all__ = ["PlayerQueries", "configure_player_router"]
