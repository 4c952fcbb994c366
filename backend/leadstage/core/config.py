"""
Configuration Management
Loads settings from YAML files and environment variables
"""
import yaml
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

from leadstage.domain.models.stage import (
    DEFAULT_DELAY_MS,
    DEFAULT_TRIGGER_DELAYS_MS,
    TriggerKind,
)

# ConfigManager substitutes ${VAR} from os.environ, which Settings does not populate
load_dotenv()


DEFAULT_TABLES = {
    "emails": "emails",
    "whatsapp_messages": "whatsapp_messages",
    "legacy_interactions": "leads_leadinteractions",
    "call_logs": "call_logs",
    "leads": "leads",
    "legacy_leads": "leads_lead",
}


class Settings(BaseSettings):
    """Application settings loaded from environment"""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # API Settings
    api_prefix: str = "/api/v1"

    # Supabase
    supabase_url: Optional[str] = None
    supabase_service_key: Optional[str] = None

    # Stage engine
    event_history_size: int = 500


@lru_cache()
def get_settings() -> Settings:
    return Settings()


class ConfigManager:
    """Manages loading and merging configuration from multiple sources"""

    def __init__(self, env: str = "development", config_dir: Optional[Path] = None):
        self.env = env
        self.config_dir = config_dir or Path(__file__).parent.parent.parent / "config"
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration files in order of precedence"""
        # Load default config if exists
        default_path = self.config_dir / "default.yaml"
        if default_path.exists():
            self._config = self._load_yaml(default_path)

        # Load environment-specific config
        env_path = self.config_dir / f"{self.env}.yaml"
        if env_path.exists():
            env_config = self._load_yaml(env_path)
            self._deep_merge(self._config, env_config)

        # Substitute environment variables
        self._substitute_env_vars(self._config)

    def _load_yaml(self, path: Path) -> Dict:
        """Load YAML file"""
        with open(path, 'r') as f:
            return yaml.safe_load(f) or {}

    def _substitute_env_vars(self, config: Dict) -> None:
        """Replace ${VAR_NAME} with environment variable values"""
        for key, value in config.items():
            if isinstance(value, dict):
                self._substitute_env_vars(value)
            elif isinstance(value, str) and value.startswith("${") and value.endswith("}"):
                env_var = value[2:-1]
                config[key] = os.getenv(env_var, value)

    def _deep_merge(self, base: Dict, override: Dict) -> None:
        """Recursively merge override into base"""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation
        Example: config.get("stage_engine.trigger_delays_ms.email") -> 1500
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_trigger_delays(self) -> Dict[TriggerKind, int]:
        """Per-kind evaluation delays in milliseconds, falling back to built-in defaults"""
        delays = {}
        for kind in TriggerKind:
            configured = self.get(f"stage_engine.trigger_delays_ms.{kind.value}")
            delays[kind] = int(configured) if configured is not None else DEFAULT_TRIGGER_DELAYS_MS[kind]
        return delays

    def get_default_delay_ms(self) -> int:
        return int(self.get("stage_engine.default_delay_ms", DEFAULT_DELAY_MS))

    def get_tables(self) -> Dict[str, str]:
        """Table names for the interaction and lead stores"""
        tables = dict(DEFAULT_TABLES)
        tables.update(self.get("stage_engine.tables", {}) or {})
        return tables


@lru_cache()
def get_config_manager() -> ConfigManager:
    return ConfigManager(get_settings().environment)
