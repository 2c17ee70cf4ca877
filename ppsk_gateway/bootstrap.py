"""Configuration loading and logging setup.

Configuration is a structured OmegaConf schema. Values come, in order of
precedence, from the process environment (after loading `.env`), an
optional YAML file, and the schema defaults.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv
from omegaconf import DictConfig, OmegaConf

logger = logging.getLogger("ppsk-gateway")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Environment variable -> dotted config key
ENV_OVERRIDES: Dict[str, str] = {
    "UNIFI_BASE": "unifi.base_url",
    "UNIFI_SITE": "unifi.site",
    "UNIFI_USER": "unifi.username",
    "UNIFI_PASS": "unifi.password",
    "UNIFI_VERSION": "unifi.version",
    "UNIFI_VERIFY_SSL": "unifi.verify_ssl",
    "UNIFI_REQUEST_TIMEOUT": "unifi.request_timeout",
    "API_BEARER_TOKEN": "server.bearer_token",
    "SERVER_HOST": "server.host",
    "SERVER_PORT": "server.port",
    "LOG_LEVEL": "log_level",
}


@dataclass
class UnifiSettings:
    base_url: str = ""
    site: str = "default"
    username: str = ""
    password: str = ""
    version: str = "9.0.0"
    verify_ssl: bool = True
    request_timeout: int = 30


@dataclass
class ServerSettings:
    host: str = "0.0.0.0"
    port: int = 8080
    bearer_token: str = ""


@dataclass
class GatewayConfig:
    unifi: UnifiSettings = field(default_factory=UnifiSettings)
    server: ServerSettings = field(default_factory=ServerSettings)
    log_level: str = "INFO"


def _env_overrides(environ: Mapping[str, str]) -> DictConfig:
    """Build a config fragment from the environment.

    Values are kept as raw strings; merging them into the typed schema
    converts "false"/"8443" into bool/int and rejects garbage.
    """
    overrides: Dict[str, Any] = {}
    for env_name, dotted_key in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value is None or value == "":
            continue
        node = overrides
        *parents, leaf = dotted_key.split(".")
        for part in parents:
            node = node.setdefault(part, {})
        node[leaf] = value
    return OmegaConf.create(overrides)


def load_config(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    dotenv: bool = True,
) -> DictConfig:
    """Load the gateway configuration.

    Args:
        config_path: Optional YAML file. Defaults to $PPSK_GATEWAY_CONFIG.
        environ: Mapping used for overrides. Defaults to os.environ.
        dotenv: Load `.env` from the working directory first.

    Returns:
        A read-only DictConfig validated against GatewayConfig.
    """
    if dotenv and environ is None:
        load_dotenv()
    env = os.environ if environ is None else environ

    layers = [OmegaConf.structured(GatewayConfig)]

    path = config_path or env.get("PPSK_GATEWAY_CONFIG")
    if path:
        if Path(path).is_file():
            layers.append(OmegaConf.load(path))
        else:
            logger.warning(f"Config file {path} not found, using environment and defaults")

    layers.append(_env_overrides(env))

    cfg = OmegaConf.merge(*layers)
    OmegaConf.set_readonly(cfg, True)
    return cfg


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)
    # aiohttp access logs are noisy at INFO
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
