"""
PitzConfig - Configuration Management

Sensible defaults with full override capability.

Example:
    >>> # Use defaults (reads from environment)
    >>> store = SettingsStore.from_config(PitzConfig())

    >>> # Explicit configuration
    >>> config = PitzConfig(
    ...     storage_backend="json",
    ...     storage_path="~/.myapp/settings.json",
    ...     throttle_ms=50,
    ... )

    >>> # From config file
    >>> config = PitzConfig.from_file("./pitz.toml")

Environment Variables:
    PITZ_THROTTLE_MS - Notification throttle window in milliseconds
    PITZ_STORAGE_BACKEND - "memory", "json", "duckdb" or "none"
    PITZ_STORAGE_PREFIX - Prefix prepended to every persisted key
    PITZ_STORAGE_PATH - File path for json/duckdb backends
    PITZ_ENCRYPTION_KEY - Passphrase for encrypting persisted values
    PITZ_PERSIST_TIMEOUT - Seconds before a storage call counts as failed
    PITZ_DEBUG - Enable debug logging in the CLI ("1", "true", "yes")
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, cast

# TOML support: tomllib is built-in for Python 3.11+, use tomli for 3.10
try:
    import tomllib

    def _load_toml(path: Path) -> dict[str, Any]:
        with open(path, "rb") as f:
            return cast(dict[str, Any], tomllib.load(f))

except ImportError:
    import tomli

    def _load_toml(path: Path) -> dict[str, Any]:
        with open(path, "rb") as f:
            return cast(dict[str, Any], tomli.load(f))


STORAGE_BACKENDS = ("memory", "json", "duckdb", "none")

_TRUTHY = {"1", "true", "yes", "on"}


class PitzConfig:
    """Configuration for pitz."""

    # === Store Configuration ===

    throttle_ms: int = 100
    """Leading-edge throttle window for snapshot notifications"""

    persist_timeout_s: float | None = None
    """Optional timeout around each storage call (None = wait forever)"""

    # === Storage Configuration ===

    storage_backend: str = "memory"
    """Storage adapter: "memory", "json", "duckdb", "none" """

    storage_prefix: str = "pitz:"
    """Namespace prepended to every persisted key"""

    storage_path: str | None = None
    """File path for the json/duckdb backends"""

    encryption_key: str | None = None
    """Passphrase for encrypting persisted values (None = plaintext)"""

    # === Diagnostics ===

    debug: bool = False
    """Verbose logging for the CLI"""

    def __init__(self, **kwargs: Any) -> None:
        """
        Initialize configuration.

        Args:
            **kwargs: Override any configuration option
        """
        # Load from environment first
        self._load_from_env()

        # Apply explicit overrides
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)
            else:
                raise ValueError(f"Unknown configuration option: {key}")

        self._check_backend()

    def _check_backend(self) -> None:
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unknown storage backend: {self.storage_backend}. "
                f"Expected one of {', '.join(STORAGE_BACKENDS)}"
            )

    def _load_from_env(self) -> None:
        """Load configuration from environment variables."""
        import os

        if throttle := os.getenv("PITZ_THROTTLE_MS"):
            self.throttle_ms = int(throttle)
        if backend := os.getenv("PITZ_STORAGE_BACKEND"):
            self.storage_backend = backend
        if prefix := os.getenv("PITZ_STORAGE_PREFIX"):
            self.storage_prefix = prefix
        if path := os.getenv("PITZ_STORAGE_PATH"):
            self.storage_path = path
        if key := os.getenv("PITZ_ENCRYPTION_KEY"):
            self.encryption_key = key
        if timeout := os.getenv("PITZ_PERSIST_TIMEOUT"):
            self.persist_timeout_s = float(timeout)
        if debug := os.getenv("PITZ_DEBUG"):
            self.debug = debug.strip().lower() in _TRUTHY

    @property
    def throttle_seconds(self) -> float:
        """Throttle window in seconds."""
        return self.throttle_ms / 1000.0

    @classmethod
    def from_file(cls, path: str | Path) -> PitzConfig:
        """
        Load configuration from TOML file.

        Example TOML:
            debug = true

            [store]
            throttle_ms = 50
            persist_timeout_s = 5.0

            [storage]
            backend = "json"
            path = "~/.myapp/settings.json"
            prefix = "myapp:"

        Args:
            path: Path to TOML configuration file

        Returns:
            PitzConfig instance with values from file

        Raises:
            FileNotFoundError: If config file doesn't exist
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        data = _load_toml(path)

        # Flatten nested sections into config keys
        flat_config: dict[str, Any] = {}

        section_mapping = {
            "store": "",
            "storage": "storage_",
        }

        for section, prefix in section_mapping.items():
            if section in data:
                for key, value in data[section].items():
                    # [storage] encryption_key is not prefixed
                    if section == "storage" and key == "encryption_key":
                        flat_config[key] = value
                    else:
                        flat_config[f"{prefix}{key}"] = value

        # Also support flat top-level keys
        for key, value in data.items():
            if key not in section_mapping and not isinstance(value, dict):
                flat_config[key] = value

        config = cls(**flat_config)

        # Environment variables take precedence over the file
        config._load_from_env()
        config._check_backend()
        return config

    @classmethod
    def from_env(cls) -> PitzConfig:
        """Load configuration from environment variables only."""
        return cls()

    def to_file(self, path: str | Path) -> None:
        """
        Save configuration to TOML file.

        The encryption key is excluded; set it via PITZ_ENCRYPTION_KEY.

        Args:
            path: Path to write TOML configuration file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        sections: dict[str, dict[str, str | int | float | bool | None]] = {
            "store": {
                "throttle_ms": self.throttle_ms,
                "persist_timeout_s": self.persist_timeout_s,
            },
            "storage": {
                "backend": self.storage_backend,
                "prefix": self.storage_prefix,
                "path": self.storage_path,
            },
        }

        # Build TOML string manually (avoids extra dependency)
        lines = ["# pitz configuration", f"debug = {str(self.debug).lower()}", ""]

        for section_name, section_values in sections.items():
            lines.append(f"[{section_name}]")
            for key, value in section_values.items():
                if isinstance(value, str):
                    lines.append(f'{key} = "{value}"')
                elif isinstance(value, bool):
                    lines.append(f"{key} = {str(value).lower()}")
                elif isinstance(value, (int, float)):
                    lines.append(f"{key} = {value}")
            lines.append("")

        lines.extend([
            "# The encryption key should be set via the PITZ_ENCRYPTION_KEY",
            "# environment variable.",
            "",
        ])

        path.write_text("\n".join(lines))

    def with_overrides(self, **kwargs: Any) -> PitzConfig:
        """Return new config with specified overrides."""
        new_config = PitzConfig.__new__(PitzConfig)
        for key in dir(self):
            if not key.startswith("_") and not callable(getattr(self, key)):
                if key == "throttle_seconds":
                    continue
                setattr(new_config, key, getattr(self, key))
        for key, value in kwargs.items():
            setattr(new_config, key, value)
        return new_config
