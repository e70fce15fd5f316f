from .server import create_app
from .service import ServerSettings

__all__ = ["ServerSettings", "create_app"]
