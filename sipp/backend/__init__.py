from .config import ClientConfig, config_path, load_client_config, run_auth, save_client_config
from .facade import AccessFacade, LocalBackend, RemoteBackend, open_client_facade, resolve_backend

__all__ = [
    "AccessFacade",
    "ClientConfig",
    "LocalBackend",
    "RemoteBackend",
    "config_path",
    "load_client_config",
    "open_client_facade",
    "resolve_backend",
    "run_auth",
    "save_client_config",
]
