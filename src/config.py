"""Load and validate the source catalog, and read runtime settings from the environment."""

import json
import logging
import os
from pathlib import Path

import jsonschema
import yaml

logger = logging.getLogger("ainews.config")

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SCHEMAS_DIR = PROJECT_ROOT / "schemas"
SOURCES_DIR = PROJECT_ROOT / "sources"
OUT_DIR = PROJECT_ROOT / "out"

DEFAULT_CATALOG = "ai-news"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000

# Checked in order; the first one set wins.
PROXY_ENV_VARS = ("HTTPS_PROXY", "https_proxy", "HTTP_PROXY", "http_proxy")


def load_schema() -> dict:
    schema_path = SCHEMAS_DIR / "catalog.schema.json"
    with open(schema_path) as f:
        return json.load(f)


def validate_catalog(catalog: dict) -> None:
    """Validate a source catalog against the JSON schema."""
    schema = load_schema()
    jsonschema.validate(instance=catalog, schema=schema)


def load_catalog(catalog_name: str | None = None) -> dict:
    """Load sources/<name>.yaml and validate it.

    Args:
        catalog_name: Catalog file stem. Defaults to $AI_NEWS_CATALOG or "ai-news".

    Returns:
        The catalog dict, with one section per source ("reddit", "hackernews", "arxiv").
    """
    name = catalog_name or os.environ.get("AI_NEWS_CATALOG", DEFAULT_CATALOG)
    catalog_path = SOURCES_DIR / f"{name}.yaml"
    if not catalog_path.exists():
        raise FileNotFoundError(f"Source catalog not found: {catalog_path}")
    with open(catalog_path) as f:
        catalog = yaml.safe_load(f) or {}

    validate_catalog(catalog)
    logger.info("Loaded catalog '%s' with sections: %s",
                name, [k for k in catalog if k not in ("catalog", "name", "description")])
    return catalog


def proxy_url() -> str | None:
    """Return the outbound HTTP(S) proxy from the environment, if any."""
    for var in PROXY_ENV_VARS:
        value = os.environ.get(var, "").strip()
        if value:
            return value
    return None


def proxy_settings() -> dict | None:
    """Proxy mapping in the form requests expects, or None to go direct."""
    url = proxy_url()
    if not url:
        return None
    return {"http": url, "https": url}


def server_settings() -> dict:
    return {
        "host": os.environ.get("AI_NEWS_HOST", DEFAULT_HOST),
        "port": int(os.environ.get("AI_NEWS_PORT", DEFAULT_PORT)),
        "log_level": os.environ.get("AI_NEWS_LOG_LEVEL", "INFO").upper(),
    }
