import os
from typing import Dict, Optional

import yaml

from models import DEFAULT_PAYMENT_REFERENCE


DEFAULTS = {
    "matching": {"similarity_threshold": 0.2},
    "payments": {"reference": DEFAULT_PAYMENT_REFERENCE},
    "xero": {"invoice_page_size": 1000},
    "square": {"api_version": "2025-10-16"},
    "http": {"timeout_seconds": 30, "max_retries": 3},
}

ENV_KEYS = {
    "square_location_id": "SQUARE_LOCATION_ID",
    "square_app_id": "SQUARE_APP_ID",
    "square_access_token": "SQUARE_ACCESS_TOKEN",
    "xero_client_id": "XERO_CLIENT_ID",
    "xero_client_secret": "XERO_CLIENT_SECRET",
    "xero_tenant_id": "XERO_TENANT_ID",
    "xero_payment_account_code": "XERO_PAYMENT_ACCOUNT_CODE",
    "exclusions": "SQUARE_SHIFT_EVENT_DESCRIPTION_EXCLUSIONS_PATTERN",
}


class ConfigError(ValueError):
    pass


def default_config_path() -> str:
    return os.path.join(os.path.dirname(os.path.dirname(__file__)), "config", "cashtx.yml")


def load_settings(path: Optional[str] = None) -> Dict:
    """YAML settings shallow-merged over DEFAULTS. A missing file means defaults."""
    path = path or default_config_path()
    try:
        with open(path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except FileNotFoundError:
        return {k: dict(v) for k, v in DEFAULTS.items()}

    if not isinstance(cfg, dict):
        raise ConfigError(f"{path}: top level must be a mapping")

    merged = {k: dict(v) for k, v in DEFAULTS.items()}
    for k, v in cfg.items():
        if isinstance(v, dict) and isinstance(merged.get(k), dict):
            mv = dict(merged[k])
            mv.update(v)
            merged[k] = mv
        else:
            merged[k] = v
    return merged


def load_credentials(environ=None) -> Dict[str, str]:
    """Read connection settings from the environment (.env already loaded)."""
    env = os.environ if environ is None else environ
    return {key: env.get(var, "") for key, var in ENV_KEYS.items()}
