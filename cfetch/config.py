"""
load the config from config.yaml and environment variables
"""

import os
import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Tuple

from .challenge import CHALLENGE_MARKERS, CHALLENGE_STATUS_CODES
from .headers import DEFAULT_HEADERS

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"

# env var -> (section, key); values stay strings, FetcherSettings coerces them
ENV_OVERRIDES = {
    'FETCHER_USER_AGENT': ('fetcher', 'user_agent'),
    'FETCHER_TIMEOUT': ('fetcher', 'timeout'),
    'FETCHER_MAX_REDIRECTS': ('fetcher', 'max_redirects'),
    'FETCHER_MAX_REFETCHES': ('fetcher', 'max_refetches'),
    'FETCHER_MAX_RESPONSE_SIZE': ('fetcher', 'max_response_size'),
    'LOG_LEVEL': ('logging', 'level'),
    'LOG_FORMAT': ('logging', 'format'),
}


class Config:
    """Sectioned settings from a YAML file, with single values overridable from the environment."""

    def __init__(self, config_path: str = None):
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._config = self._read_yaml()
        for env_var, (section, key) in ENV_OVERRIDES.items():
            value = os.getenv(env_var)
            if value is not None:
                self._section(section)[key] = value

    def _read_yaml(self) -> Dict[str, Any]:
        try:
            with open(self.config_path, 'r') as f:
                loaded = yaml.safe_load(f) or {}
        except FileNotFoundError:
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

        if not isinstance(loaded, dict):
            raise ValueError(f"Configuration file must hold a mapping: {self.config_path}")
        return loaded

    def _section(self, name: str) -> Dict[str, Any]:
        if not isinstance(self._config.get(name), dict):
            self._config[name] = {}
        return self._config[name]

    def get(self, *keys, default=None):
        """Walk nested keys, e.g. ``get('fetcher', 'timeout')``; default when any is missing."""
        current = self._config
        for key in keys:
            if not isinstance(current, dict) or key not in current:
                return default
            current = current[key]
        return current

    @property
    def fetcher(self) -> Dict[str, Any]:
        return self.get('fetcher', default={})

    @property
    def challenge(self) -> Dict[str, Any]:
        return self.get('challenge', default={})

    @property
    def logging(self) -> Dict[str, Any]:
        return self.get('logging', default={})


@dataclass
class FetcherSettings:
    """Typed view of the fetcher and challenge sections."""

    user_agent: str = DEFAULT_HEADERS['User-Agent']
    timeout: float = 30.0
    max_redirects: int = 5
    max_refetches: int = 5
    max_response_size: int = 10 * 1024 * 1024  # 10MB
    max_connections: int = 20
    max_keepalive_connections: int = 10
    challenge_status_codes: Tuple[int, ...] = CHALLENGE_STATUS_CODES
    challenge_markers: Tuple[str, ...] = CHALLENGE_MARKERS
    extra_headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: Config) -> "FetcherSettings":
        fetcher = config.fetcher
        challenge = config.challenge
        defaults = cls()
        return cls(
            user_agent=str(fetcher.get('user_agent', defaults.user_agent)),
            timeout=float(fetcher.get('timeout', defaults.timeout)),
            max_redirects=int(fetcher.get('max_redirects', defaults.max_redirects)),
            max_refetches=int(fetcher.get('max_refetches', defaults.max_refetches)),
            max_response_size=int(fetcher.get('max_response_size', defaults.max_response_size)),
            max_connections=int(fetcher.get('max_connections', defaults.max_connections)),
            max_keepalive_connections=int(
                fetcher.get('max_keepalive_connections', defaults.max_keepalive_connections)
            ),
            challenge_status_codes=tuple(
                int(code) for code in challenge.get('status_codes', defaults.challenge_status_codes)
            ),
            challenge_markers=tuple(challenge.get('markers', defaults.challenge_markers)),
            extra_headers=dict(fetcher.get('headers') or {}),
        )
