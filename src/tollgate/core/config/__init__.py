from .loader import ClientSettings, load_settings

__all__ = ["ClientSettings", "load_settings"]
