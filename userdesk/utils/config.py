import copy
import os
from pathlib import Path
from typing import Any

import tomli
import tomli_w


def get_cache_dir() -> Path:
    xdg = os.environ.get("XDG_CACHE_HOME")
    if xdg:
        base = Path(xdg)
    else:
        base = Path.home() / ".cache"
    return base / "userdesk"


def get_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        base = Path(xdg)
    else:
        base = Path.home() / ".config"
    return base / "userdesk"


def get_config_path() -> Path:
    return get_config_dir() / "config.toml"


def get_log_dir() -> Path:
    return get_cache_dir() / "log"


DEFAULT_CONFIG: dict[str, Any] = {
    "api": {
        "base_url": "https://jsonplaceholder.typicode.com",
        "request_timeout": 30,
    },
    "display": {
        "page_size": 5,
    },
    "logging": {
        "level": "info",
    },
}


def load_config() -> dict[str, Any]:
    config_path = get_config_path()
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path.exists():
        with open(config_path, "rb") as f:
            user_config = tomli.load(f)
            _merge_config(config, user_config)

    return config


def save_config(config: dict[str, Any]) -> None:
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)


def _merge_config(base: dict, override: dict) -> None:
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _merge_config(base[key], value)
        else:
            base[key] = value


def get_base_url(config: dict) -> str:
    return config.get("api", {}).get("base_url", DEFAULT_CONFIG["api"]["base_url"]).rstrip("/")


def get_request_timeout(config: dict) -> float:
    env_timeout = os.environ.get("USERDESK_REQUEST_TIMEOUT")
    if env_timeout:
        return float(env_timeout)
    return float(config.get("api", {}).get("request_timeout", DEFAULT_CONFIG["api"]["request_timeout"]))


def get_page_size(config: dict) -> int:
    return int(config.get("display", {}).get("page_size", DEFAULT_CONFIG["display"]["page_size"]))


def set_config_value(config: dict, section: str, key: str, value: Any) -> None:
    config.setdefault(section, {})[key] = value
    save_config(config)
