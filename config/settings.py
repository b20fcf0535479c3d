import os
import yaml
from typing import Dict, Any, Optional

class Settings:
    """Configuration management for the heatbar traffic visualizer."""

    def __init__(self, config_file: Optional[str] = None):
        self.config_file = config_file or os.getenv('HEATBAR_CONFIG_FILE', 'config/config.yaml')
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file and environment variables."""
        config = {}

        # Load from YAML file if exists
        if os.path.exists(self.config_file):
            with open(self.config_file, 'r') as f:
                config = yaml.safe_load(f) or {}

        heatbar = config.get('heatbar', {}) or {}
        capture = config.get('capture', {}) or {}
        log_config = config.get('logging', {}) or {}

        # Override with environment variables
        config.update({
            'heatbar': {
                'max_bytes': os.getenv('HEATBAR_MAX_BYTES', heatbar.get('max_bytes', 150000)),
                'max_heat': os.getenv('HEATBAR_MAX_HEAT', heatbar.get('max_heat', 1000000)),
                'max_heat_display': os.getenv('HEATBAR_MAX_HEAT_DISPLAY', heatbar.get('max_heat_display', 1000000)),
                'decay_interval': os.getenv('HEATBAR_DECAY_INTERVAL', heatbar.get('decay_interval', 0.5)),
                'decay_rate': os.getenv('HEATBAR_DECAY_RATE', heatbar.get('decay_rate', 500)),
                'refresh_interval': os.getenv('HEATBAR_REFRESH_INTERVAL', heatbar.get('refresh_interval', 1 / 60)),
                'address_column_width': heatbar.get('address_column_width', 16),
                'separator': heatbar.get('separator', ' | '),
                'evict_after_ticks': os.getenv('HEATBAR_EVICT_AFTER_TICKS', heatbar.get('evict_after_ticks', 0)),
            },
            'capture': {
                'interface': os.getenv('HEATBAR_INTERFACE', capture.get('interface')),
                'bpf_filter': os.getenv('HEATBAR_BPF_FILTER', capture.get('bpf_filter', 'ip or ip6')),
                'poll_timeout': capture.get('poll_timeout', 1.0),
            },
            'logging': {
                'level': os.getenv('LOG_LEVEL', log_config.get('level', 'INFO')),
                'file': os.getenv('LOG_FILE', log_config.get('file', 'logs/heatbar.log')),
                'max_bytes': int(os.getenv('LOG_MAX_BYTES', log_config.get('max_bytes', 10485760))),
                'backup_count': int(os.getenv('LOG_BACKUP_COUNT', log_config.get('backup_count', 5))),
            },
        })

        return config

    def reload(self, config_file: Optional[str] = None) -> None:
        """Re-read configuration, optionally from a different file."""
        if config_file:
            self.config_file = config_file
        self.config = self._load_config()

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value using dot notation (used for CLI overrides)."""
        keys = key.split('.')
        target = self.config

        for k in keys[:-1]:
            if not isinstance(target.get(k), dict):
                target[k] = {}
            target = target[k]

        target[keys[-1]] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation."""
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

# Global settings instance
settings = Settings()
