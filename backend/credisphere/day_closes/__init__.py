from .queries import DayCloseQueries
from .routes import configure_day_close_router

__all__ = ["DayCloseQueries", "configure_day_close_router"]
