"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).
    
    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)
    
    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback
    
    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name
    
    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.info(f"Loaded {secret_name} from /run/secrets")
                return secret_value
        except OSError as e:
            logger.warning(f"Failed to read /run/secrets/{secret_name}: {e}")
    
    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value
    
    return None


def _get_bool(var_name: str, default: bool = False) -> bool:
    return os.environ.get(var_name, str(default)).strip().lower() == "true"


def _get_number(var_name: str, default: float) -> float:
    raw = os.environ.get(var_name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"Environment variable {var_name} must be a number, got {raw!r}.")


def _get_or_generate(var_name: str, demo_default: Optional[str] = None, required: bool = True, demo_mode: bool = False) -> str:
    """Get environment variable or use demo default."""
    value = os.environ.get(var_name)
    if value:
        return value
    
    if demo_mode and demo_default is not None:
        logger.info(f"[demo-mode] Using default for {var_name}")
        return demo_default
    
    if not required:
        return ""
    
    raise RuntimeError(f"Environment variable {var_name} is required in production mode.")


@dataclass
class AppConfig:
    """Application configuration container."""
    # Mode
    demo_mode: bool = False
    
    # Document store (MongoDB); empty connection string means in-memory store
    mongodb_connection: str = ""
    database: str = "scim"
    collection: str = "users"
    store_timeout_seconds: float = 5
    
    # Downstream provisioning target; empty URL disables forwarding
    provisioning_client_url: str = ""
    client_id: str = ""
    provisioning_timeout_seconds: float = 5
    
    # SCIM listing
    default_page_size: int = 100
    max_page_size: int = 200
    
    # Public base URL used for Location headers (request host when empty)
    app_base_url: str = ""
    
    provisioning_params: dict[str, str] = field(default_factory=dict)
    
    @property
    def forwarding_enabled(self) -> bool:
        return bool(self.provisioning_client_url)
    
    @property
    def uses_memory_store(self) -> bool:
        return not self.mongodb_connection


def load_settings() -> AppConfig:
    """Load application settings from environment and /run/secrets."""
    demo_mode = _get_bool("DEMO_MODE")
    
    # Connection strings carry credentials: prefer the Docker secret
    mongodb_connection = _load_secret_from_file("mongodb_connection", "MONGODB_CONNECTION") or ""
    if not mongodb_connection:
        mongodb_connection = _get_or_generate("MONGODB_CONNECTION", demo_default="", demo_mode=demo_mode)
    
    database = os.environ.get("DATABASE", "scim")
    collection = os.environ.get("COLLECTION", "users")
    store_timeout_seconds = _get_number("STORE_TIMEOUT_SECONDS", 5)
    
    provisioning_client_url = os.environ.get("PROVISIONING_CLIENT_URL", "").strip()
    client_id = os.environ.get("CLIENT_ID", "").strip()
    provisioning_params = {"client_id": client_id} if client_id else {}
    provisioning_timeout_seconds = _get_number("PROVISIONING_TIMEOUT_SECONDS", 5)
    
    default_page_size = int(_get_number("SCIM_DEFAULT_PAGE_SIZE", 100))
    max_page_size = int(_get_number("SCIM_MAX_PAGE_SIZE", 200))
    if default_page_size > max_page_size:
        default_page_size = max_page_size
    
    app_base_url = os.environ.get("APP_BASE_URL", "").rstrip("/")
    
    mode_label = "DEMO" if demo_mode else "PRODUCTION"
    store_label = "memory" if not mongodb_connection else f"mongodb:{database}.{collection}"
    logger.info(
        f"Mode={mode_label} | store={store_label} | "
        f"forwarding={'on' if provisioning_client_url else 'off'}"
    )
    
    return AppConfig(
        demo_mode=demo_mode,
        mongodb_connection=mongodb_connection,
        database=database,
        collection=collection,
        store_timeout_seconds=store_timeout_seconds,
        provisioning_client_url=provisioning_client_url,
        client_id=client_id,
        provisioning_timeout_seconds=provisioning_timeout_seconds,
        default_page_size=default_page_size,
        max_page_size=max_page_size,
        app_base_url=app_base_url,
        provisioning_params=provisioning_params,
    )
