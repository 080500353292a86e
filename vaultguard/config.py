# vaultguard/config.py
"""
Simple settings persistence for VaultGuard.
Settings saved as JSON in %APPDATA%/VaultGuard/config.json (Windows) or ~/.vaultguard/config.json (fallback).
VAULTGUARD_HOME overrides the directory; VAULTGUARD_API_URL and VAULTGUARD_TOKEN override the backend settings.
"""

import os
import json
import logging
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {
    "api_url": None,       # if None, the local vault file is used
    "vault_path": None,    # if None, default_vault_path() is used
    "generator_length": 16,
    "request_timeout": 10.0,
    "log_level": "WARNING",
}

ENV_OVERRIDES = {
    "VAULTGUARD_API_URL": "api_url",
    "VAULTGUARD_TOKEN": "token",
}


def _appdata_dir() -> str:
    home = os.getenv("VAULTGUARD_HOME")
    appdata = os.getenv("APPDATA")
    if home:
        d = home
    elif appdata:
        d = os.path.join(appdata, "VaultGuard")
    else:
        d = os.path.join(os.path.expanduser("~"), ".vaultguard")
    os.makedirs(d, exist_ok=True)
    return d


def config_path() -> str:
    return os.path.join(_appdata_dir(), "config.json")


def default_vault_path() -> str:
    return os.path.join(_appdata_dir(), "vault.json")


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    p = path or config_path()
    out = DEFAULTS.copy()
    if os.path.exists(p):
        try:
            with open(p, "r", encoding="utf-8") as f:
                data = json.load(f)
            # merge defaults
            out.update(data or {})
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable config %s: %s", p, e)
    for var, key in ENV_OVERRIDES.items():
        if os.getenv(var):
            out[key] = os.getenv(var)
    return out


def save_config(cfg: Dict[str, Any], path: Optional[str] = None) -> None:
    p = path or config_path()
    # never persist the session token
    data = {k: v for k, v in cfg.items() if k != "token"}
    with open(p, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
