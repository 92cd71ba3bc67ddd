import json
import logging
from pathlib import Path
from typing import Any, Optional
from dataclasses import dataclass, fields, asdict

logger = logging.getLogger(__name__)

class ConfigError(ValueError):
    """Raised when the server configuration cannot be used"""

@dataclass
class ServeConfig:
    root: str = "."
    host: str = "localhost"
    port: int = 8080
    markdown: bool = True
    debounce_delay: float = 0.25  # seconds
    log_level: str = "INFO"
    force_polling: bool = False

class ConfigManager:
    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path) if config_path else None
        self.config = self._load_config()
        
    def _load_config(self) -> ServeConfig:
        """Load configuration from file or create default"""
        if self.config_path and self.config_path.exists():
            with open(self.config_path) as f:
                try:
                    config_dict = json.load(f)
                except json.JSONDecodeError as e:
                    raise ConfigError(f"Invalid JSON in {self.config_path}: {e}") from e
            if not isinstance(config_dict, dict):
                raise ConfigError(f"Configuration in {self.config_path} must be a JSON object")
            unknown = set(config_dict) - self._keys()
            if unknown:
                raise ConfigError(
                    f"Unknown configuration keys in {self.config_path}: {', '.join(sorted(unknown))}"
                )
            for key, value in config_dict.items():
                self._check_type(key, value)
            logger.debug(f"Loaded configuration from {self.config_path}")
            return ServeConfig(**config_dict)
        return ServeConfig()

    @staticmethod
    def _keys() -> set:
        return {field.name for field in fields(ServeConfig)}

    @staticmethod
    def _check_type(key: str, value: Any):
        expected = type(getattr(ServeConfig, key))
        if expected is float and isinstance(value, int) and not isinstance(value, bool):
            return
        # bool is an int subclass, so compare exact types
        if type(value) is not expected:
            raise ConfigError(
                f"Configuration key {key} must be {expected.__name__}, got {type(value).__name__}"
            )
        
    def save_config(self):
        """Save current configuration to file"""
        if self.config_path is None:
            return
        with open(self.config_path, 'w') as f:
            json.dump(asdict(self.config), f, indent=2)
            
    def get(self, key: str) -> Any:
        """Get configuration value"""
        return getattr(self.config, key)
        
    def update(self, key: str, value: Any):
        """Update configuration value"""
        if key in self._keys():
            setattr(self.config, key, value)
            self.save_config()
        else:
            raise KeyError(f"Unknown configuration key: {key}")

    def override(self, **values: Any) -> ServeConfig:
        """Apply non-None values on top of the loaded configuration without saving"""
        for key, value in values.items():
            if value is None:
                continue
            if key not in self._keys():
                raise KeyError(f"Unknown configuration key: {key}")
            setattr(self.config, key, value)
        return self.config

    def validate(self) -> ServeConfig:
        """Check that the configuration describes a servable tree"""
        config = self.config
        for key, value in asdict(config).items():
            self._check_type(key, value)
        if not Path(config.root).is_dir():
            raise ConfigError(f"Root is not a directory: {config.root}")
        if not 0 <= config.port <= 65535:
            raise ConfigError(f"Port out of range: {config.port}")
        if config.debounce_delay < 0:
            raise ConfigError(f"Debounce delay must not be negative: {config.debounce_delay}")
        return config
