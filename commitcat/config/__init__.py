"""Configuration Management Package"""

import json
import os
import sys
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Optional

from commitcat import LANGUAGE_CODES, MODEL_TIERS, PROVIDER_NAMES, TIER_NAMES

# Valid configuration values
VALID_PROVIDERS = set(PROVIDER_NAMES)
VALID_LANGUAGES = set(LANGUAGE_CODES)
VALID_TIERS = set(TIER_NAMES)

DEFAULT_IGNORE_PATTERNS = [
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "bun.lockb",
    ".map",
    "dist/",
    "build/",
    ".DS_Store",
]

DEFAULT_BINARY_EXTENSIONS = [
    ".png", ".jpg", ".jpeg", ".gif", ".ico", ".svg",
    ".woff", ".woff2", ".ttf", ".eot",
    ".mp4", ".mov", ".mp3",
    ".zip", ".tar", ".gz", ".pdf",
]

# Credential env vars per provider, checked in order
API_KEY_ENV_VARS = {
    "gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "claude": ("ANTHROPIC_API_KEY",),
}


class PreconditionError(Exception):
    """Raised when the run cannot start (missing credential, nothing to commit)."""
    pass


@dataclass
class Config:
    """User configuration with sensible defaults."""
    provider: str = "gemini"
    model: Optional[str] = None
    tier: str = "lite"
    language: str = "en"
    max_file_size: int = 30000
    max_total_size: int = 100000
    max_prompt_chars: int = 5000
    temperature: float = 0.2
    ignore_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS))
    binary_extensions: list[str] = field(default_factory=lambda: list(DEFAULT_BINARY_EXTENSIONS))

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}

    def validate(self) -> list[str]:
        """Validate config values and return list of warnings.

        Invalid values are replaced with defaults silently after warning.
        """
        warnings = []
        defaults = Config()

        # JSON can hand us lists or numbers here; check the type before the set lookup
        for name, allowed in (("provider", VALID_PROVIDERS), ("tier", VALID_TIERS), ("language", VALID_LANGUAGES)):
            value = getattr(self, name)
            if not isinstance(value, str) or value not in allowed:
                default = getattr(defaults, name)
                warnings.append(f"Invalid {name} '{value}', using '{default}'")
                setattr(self, name, default)

        if self.model is not None and not isinstance(self.model, str):
            warnings.append(f"Invalid model '{self.model}', using the {self.tier} tier model")
            self.model = None

        for name in ("max_file_size", "max_total_size", "max_prompt_chars"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                warnings.append(f"Invalid {name} '{value}', using {getattr(defaults, name)}")
                setattr(self, name, getattr(defaults, name))

        if isinstance(self.temperature, bool) or not isinstance(self.temperature, (int, float)) \
                or not 0 <= self.temperature <= 2:
            warnings.append(f"Invalid temperature '{self.temperature}', using {defaults.temperature}")
            self.temperature = defaults.temperature

        for name in ("ignore_patterns", "binary_extensions"):
            value = getattr(self, name)
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                warnings.append(f"Invalid {name}, expected a list of strings; using defaults")
                setattr(self, name, getattr(defaults, name))

        return warnings

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        config = cls(**filtered)
        # Validate and print warnings to stderr
        for warning in config.validate():
            print(f"Config warning: {warning}", file=sys.stderr)
        return config


@dataclass(frozen=True)
class Settings:
    """Everything a run needs, resolved once at startup."""
    provider: str
    model: str
    language: str
    api_key: str
    config: Config


def resolve_model(provider: str, tier: str, model: Optional[str] = None) -> str:
    """Explicit model name wins; otherwise map the tier to the provider's model."""
    if model:
        return model
    return MODEL_TIERS[provider][tier]


def resolve_api_key(provider: str) -> str:
    """Read the provider credential from the environment.

    Raises:
        PreconditionError: if no credential is set
    """
    names = API_KEY_ENV_VARS.get(provider, ())
    for name in names:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    wanted = " or ".join(names) or f"an API key for '{provider}'"
    raise PreconditionError(
        f"{wanted} not found.\n"
        f"  Set it in your shell or in a .env file:\n"
        f"  export {names[0] if names else 'API_KEY'}='your-key-here'"
    )


class ConfigManager:
    """Manages loading and saving configuration."""

    CONFIG_FILENAME = ".catrc"

    def __init__(self):
        self._config: Optional[Config] = None
        self._config_path: Optional[Path] = None

    def load(self) -> Config:
        if self._config is not None:
            return self._config

        local_path = Path.cwd() / self.CONFIG_FILENAME
        if local_path.exists():
            self._config = self._load_from_file(local_path)
            self._config_path = local_path
            return self._config

        home_path = Path.home() / self.CONFIG_FILENAME
        if home_path.exists():
            self._config = self._load_from_file(home_path)
            self._config_path = home_path
            return self._config

        self._config = Config()
        return self._config

    def _load_from_file(self, path: Path) -> Config:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("top-level value must be an object")
            return Config.from_dict(data)
        except (json.JSONDecodeError, ValueError, OSError) as e:
            print(f"Warning: Could not load {path}: {e}", file=sys.stderr)
            return Config()

    def save(self, config: Config, global_config: bool = True) -> Path:
        path = Path.home() / self.CONFIG_FILENAME if global_config else Path.cwd() / self.CONFIG_FILENAME
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(config.to_dict(), f, indent=2)
        return path

    def get_config_path(self) -> Optional[Path]:
        return self._config_path


_manager = ConfigManager()


def load_config() -> Config:
    return _manager.load()


def save_config(config: Config, global_config: bool = True) -> Path:
    return _manager.save(config, global_config)


def get_config_path() -> Optional[Path]:
    return _manager.get_config_path()


__all__ = [
    "Config",
    "ConfigManager",
    "PreconditionError",
    "Settings",
    "load_config",
    "save_config",
    "get_config_path",
    "resolve_api_key",
    "resolve_model",
    "VALID_PROVIDERS",
    "VALID_LANGUAGES",
    "VALID_TIERS",
    "API_KEY_ENV_VARS",
]
