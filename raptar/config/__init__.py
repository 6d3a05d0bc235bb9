from raptar.config.models import DefaultSettings, IgnoreSettings, RaptarConfig
from raptar.config.repository import ConfigRepository

__all__ = ["ConfigRepository", "DefaultSettings", "IgnoreSettings", "RaptarConfig"]
