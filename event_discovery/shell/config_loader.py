"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

Models (Config, CatalogConfig, ...) are defined in event_discovery/core/config.py
to avoid information leakage between layers.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Any, Optional

import yaml

from event_discovery.core.config import (
    CatalogConfig,
    Config,
    EngineConfig,
    FavoritesConfig,
)
from event_discovery.shell.secret_manager_client import SecretManagerClient, SecretManagerConfig


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = "config/config.yaml"
DEFAULT_API_KEY_SECRET = "ticketmaster-api-key"


def _get_secret_manager_client() -> Optional[SecretManagerClient]:
    """Get or create a Secret Manager client.

    Returns None if no GCP project can be determined (e.g., local development).
    """
    project_id = os.environ.get("GCP_PROJECT")
    if not project_id:
        # Try to get from gcloud config
        try:
            result = subprocess.run(
                ["gcloud", "config", "get-value", "project"],
                capture_output=True,
                text=True,
                timeout=2,
            )
            if result.returncode == 0 and result.stdout.strip():
                project_id = result.stdout.strip()
        except (OSError, subprocess.SubprocessError):
            logger.debug("gcloud not available to determine project")

    if project_id:
        return SecretManagerClient(SecretManagerConfig(project_id=project_id))
    return None


def _resolve_value(value: Any, secret_client: Optional[SecretManagerClient] = None) -> Any:
    """Resolve a value that may contain secret or env var placeholders.

    Args:
        value: Value to resolve (may contain ${...} placeholders)
        secret_client: Client for resolving secrets

    Returns:
        Resolved value
    """
    if not isinstance(value, str):
        return value

    if secret_client:
        return secret_client.resolve(value)

    # No secret client - only handle env vars
    if value.startswith("${") and value.endswith("}"):
        var_spec = value[2:-1]
        if not var_spec.startswith("secret:"):
            env_value = os.environ.get(var_spec)
            if env_value:
                return env_value
            logger.warning("Environment variable %s not set", var_spec)

    return value


def _parse_catalog(
    data: dict[str, Any],
    secret_client: Optional[SecretManagerClient] = None,
) -> CatalogConfig:
    """Parse catalog settings from config data."""
    defaults = CatalogConfig()

    classifications = data.get("classification_names", defaults.classification_names)
    if isinstance(classifications, str):
        classifications = [c.strip() for c in classifications.split(",") if c.strip()]

    return CatalogConfig(
        api_key=_resolve_value(data.get("api_key", ""), secret_client),
        base_url=data.get("base_url"),
        page_size=int(data.get("page_size", defaults.page_size)),
        classification_names=tuple(classifications),
        sort=data.get("sort", defaults.sort),
        timeout_seconds=int(data.get("timeout_seconds", defaults.timeout_seconds)),
    )


def _parse_engine(data: dict[str, Any]) -> EngineConfig:
    """Parse engine settings from config data."""
    defaults = EngineConfig()
    return EngineConfig(
        default_radius_miles=int(data.get("default_radius_miles", defaults.default_radius_miles)),
        date_window_days=int(data.get("date_window_days", defaults.date_window_days)),
        load_more_threshold=int(data.get("load_more_threshold", defaults.load_more_threshold)),
        location_change_threshold_km=float(
            data.get("location_change_threshold_km", defaults.location_change_threshold_km)
        ),
        max_workers=int(data.get("max_workers", defaults.max_workers)),
    )


def _parse_favorites(data: dict[str, Any]) -> FavoritesConfig:
    """Parse favorites storage settings from config data."""
    defaults = FavoritesConfig()
    return FavoritesConfig(
        firestore_database=data.get("firestore_database"),
        collection=data.get("collection", defaults.collection),
        field=data.get("field", defaults.field),
    )


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only placeholder expansion has side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    secret_client = _get_secret_manager_client()

    return Config(
        catalog=_parse_catalog(data.get("catalog") or {}, secret_client),
        engine=_parse_engine(data.get("engine") or {}),
        favorites=_parse_favorites(data.get("favorites") or {}),
    )


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", DEFAULT_CONFIG_PATH)

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return Config()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return Config()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: page size %d, default radius %d miles, %d-day window",
        config.catalog.page_size,
        config.engine.default_radius_miles,
        config.engine.date_window_days,
    )

    return config


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Useful for simple deployments without a YAML file.

    Environment variables:
        TICKETMASTER_API_KEY: Discovery API key (or use Secret Manager)
        TICKETMASTER_API_KEY_SECRET: Secret name holding the key
        DEFAULT_RADIUS_MILES: Radius used before the user picks one
        PAGE_SIZE: Events per catalog page
        FIRESTORE_DATABASE: Firestore database holding user favorites

    Returns:
        Config object from environment
    """
    secret_client = _get_secret_manager_client()
    api_key = None

    secret_name = os.environ.get("TICKETMASTER_API_KEY_SECRET", DEFAULT_API_KEY_SECRET)
    if secret_client:
        api_key = secret_client.get_secret(secret_name)
        if api_key:
            logger.info("Using catalog API key from Secret Manager")

    # Fall back to environment variable
    if not api_key:
        api_key = os.environ.get("TICKETMASTER_API_KEY")

    if not api_key:
        logger.warning("TICKETMASTER_API_KEY not set and no secret found")
        api_key = ""

    catalog_defaults = CatalogConfig()
    engine_defaults = EngineConfig()

    return Config(
        catalog=CatalogConfig(
            api_key=api_key,
            page_size=int(os.environ.get("PAGE_SIZE", catalog_defaults.page_size)),
        ),
        engine=EngineConfig(
            default_radius_miles=int(
                os.environ.get("DEFAULT_RADIUS_MILES", engine_defaults.default_radius_miles)
            ),
        ),
        favorites=FavoritesConfig(
            firestore_database=os.environ.get("FIRESTORE_DATABASE"),
        ),
    )
