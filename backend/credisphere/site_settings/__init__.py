from .queries import SiteSettingQueries
from .routes import configure_site_setting_router

__all__ = ["SiteSettingQueries", "configure_site_setting_router"]
