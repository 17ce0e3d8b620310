"""Configuration module for the SCIM user store."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]
