"""Configuration management for the nimbusec client."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Default endpoint of the nimbusec API.
DEFAULT_API = "https://api.nimbusec.com/"

ENV_URL = "NIMBUSEC_URL"
ENV_KEY = "NIMBUSEC_KEY"
ENV_SECRET = "NIMBUSEC_SECRET"
ENV_TIMEOUT = "NIMBUSEC_TIMEOUT"


class ClientConfig(BaseModel):
    """Endpoint and credentials of an API client. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(default=DEFAULT_API, description="Base URL of the nimbusec API")
    key: str = Field(..., description="OAuth consumer key")
    secret: str = Field(..., description="OAuth consumer secret")
    timeout: Optional[float] = Field(
        default=None, description="Request timeout in seconds, None waits forever"
    )

    def __repr__(self) -> str:
        return f"ClientConfig(url={self.url!r}, key={self.key!r}, timeout={self.timeout!r})"


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    environ: Optional[Dict[str, str]] = None,
) -> ClientConfig:
    """Load client configuration from a JSON file and the environment.

    Values from the environment (NIMBUSEC_URL, NIMBUSEC_KEY, NIMBUSEC_SECRET,
    NIMBUSEC_TIMEOUT) take precedence over values from the file.

    Args:
        config_path: Optional path to a JSON file with url/key/secret/timeout
        environ: Environment mapping, defaults to os.environ

    Returns:
        ClientConfig built from the merged values

    Raises:
        ConfigurationError: If the file cannot be read or key/secret are missing
    """
    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    if config_path is not None:
        path = Path(config_path)
        try:
            with open(path, "r") as f:
                loaded = json.load(f)
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration file {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid configuration file {path}: {e}") from e
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Invalid configuration file {path}: not an object")
        values.update(loaded)
        logger.debug(f"Loaded configuration from {path}")

    if env.get(ENV_URL):
        values["url"] = env[ENV_URL]
    if env.get(ENV_KEY):
        values["key"] = env[ENV_KEY]
    if env.get(ENV_SECRET):
        values["secret"] = env[ENV_SECRET]
    if env.get(ENV_TIMEOUT):
        values["timeout"] = env[ENV_TIMEOUT]

    missing = [name for name in ("key", "secret") if not values.get(name)]
    if missing:
        raise ConfigurationError(
            f"Missing nimbusec credentials: {', '.join(missing)} "
            f"(set {ENV_KEY} and {ENV_SECRET} or use a configuration file)"
        )

    try:
        return ClientConfig(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
