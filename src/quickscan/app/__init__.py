from .env import Env, get_env, pick
from .logging import setup_logging
from .settings import AppSettings, get_app_settings

__all__ = ["Env", "get_env", "pick", "setup_logging", "AppSettings", "get_app_settings"]
