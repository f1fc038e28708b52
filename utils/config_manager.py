"""
Configuration Manager
YAML settings with dot-path access and environment overrides.

Any variable named POMO__<SECTION>__<KEY> overrides the matching YAML key
after loading, e.g. POMO__POMODORO__SESSION_MINUTES=50. Values are parsed as
YAML scalars so numbers and booleans keep their type.
"""
import os
import yaml
from typing import Any, Dict, Optional

ENV_PREFIX = "POMO__"
CONFIG_PATH_ENV = "POMO_CONFIG"


class ConfigManager:
    """Process-wide settings store."""

    _instance = None
    _config: Dict[str, Any] = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def load_config(self, config_path: Optional[str] = None):
        """
        Load settings from YAML, then apply environment overrides.

        Args:
            config_path: File to read; defaults to $POMO_CONFIG, then config.yaml

        Raises:
            FileNotFoundError: If the file does not exist
        """
        path = config_path or os.environ.get(CONFIG_PATH_ENV) or "config.yaml"
        if not os.path.exists(path):
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, 'r') as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Configuration root must be a mapping: {path}")
        self._config = loaded
        self.apply_env_overrides()

    def apply_env_overrides(self, environ: Optional[Dict[str, str]] = None) -> int:
        """Copy POMO__ variables into the settings; returns how many were applied."""
        environ = os.environ if environ is None else environ
        applied = 0
        for name, raw in environ.items():
            if not name.startswith(ENV_PREFIX):
                continue
            parts = [p.lower() for p in name[len(ENV_PREFIX):].split('__') if p]
            if not parts:
                continue
            try:
                value = yaml.safe_load(raw)
            except yaml.YAMLError:
                value = raw
            self.set('.'.join(parts), value)
            applied += 1
        return applied

    def get(self, key_path: str, default: Any = None) -> Any:
        """Value at a dot path such as 'pomodoro.session_minutes'."""
        value = self._config
        for key in key_path.split('.'):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def set(self, key_path: str, value: Any):
        """Set a value at a dot path, creating sections as needed."""
        keys = key_path.split('.')
        node = self._config
        for key in keys[:-1]:
            if not isinstance(node.get(key), dict):
                node[key] = {}
            node = node[key]
        node[keys[-1]] = value

    def section(self, name: str) -> Dict[str, Any]:
        """Copy of one top-level section, empty if missing."""
        value = self._config.get(name)
        return dict(value) if isinstance(value, dict) else {}

    def reset(self):
        self._config = {}

    def save(self, config_path: str = "config.yaml"):
        """Write the current settings back to YAML."""
        with open(config_path, 'w') as f:
            yaml.safe_dump(self._config, f, default_flow_style=False, sort_keys=False)

    @property
    def is_production(self) -> bool:
        return str(self.get('app.environment', 'development')).lower() == 'production'

    @property
    def all(self) -> Dict[str, Any]:
        return self._config


# Global config instance
config = ConfigManager()
