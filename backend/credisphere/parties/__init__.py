from .queries import PartyQueries
from .routes import configure_party_router

__all__ = ["PartyQueries", "configure_party_router"]
