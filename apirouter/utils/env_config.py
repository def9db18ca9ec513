"""
Router Configuration Store

Supplies the defaults every VersionRouter is built with. Values come from
environment variables (always checked first, so tests and deployments can
flip them at any time), an optional YAML/JSON file and a `.env` file. The
`.env` file is only read when named through APIROUTER_DOTENV_FILE or the
`dotenv_path` argument.

Usage:
    from apirouter.utils.env_config import env_config

    param = env_config.get('API_VERSION_PARAM', 'v')

    # Register callback for config changes
    def on_log_level_change(old_value, new_value):
        logging.getLogger('apirouter').setLevel(new_value)

    env_config.register_callback('LOG_LEVEL', on_log_level_change)

    env_config.reload()
"""

import os
import json
import yaml
import logging
import threading
from typing import Any, Dict, Callable, List, Optional
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger('apirouter.router')

RELOADABLE_KEYS = [
    'ENV',

    'LOG_LEVEL',
    'LOG_FORMAT',

    'API_VERSION_PARAM',
    'API_VERSION_HEADER',
    'API_VERSION_RESPONSE_HEADER',
    'API_VERSION_ORDER',
    'API_PASS_VERSION',

    'API_PARAM_ORDER',
    'API_PARAM_MAP',
    'API_PREFIX',
]


class EnvConfig:
    """
    Thread-safe configuration store with reload support.

    Supports:
    - Environment variables (always checked first)
    - YAML/JSON configuration files
    - Runtime reloads
    - Callbacks for configuration changes
    """

    def __init__(self, config_file: Optional[str] = None, dotenv_path: Optional[str] = None):
        dotenv_path = dotenv_path or os.getenv('APIROUTER_DOTENV_FILE')
        if dotenv_path:
            load_dotenv(dotenv_path)
        self._lock = threading.RLock()
        self._config: Dict[str, Any] = {}
        self._callbacks: Dict[str, list] = {}
        self._config_file = config_file or os.getenv('APIROUTER_CONFIG_FILE')
        self._load_initial_config()

    def _load_initial_config(self):
        with self._lock:
            self._config = {}

            if self._config_file and os.path.exists(self._config_file):
                try:
                    self._load_from_file(self._config_file)
                    logger.info(f'Loaded configuration from {self._config_file}')
                except Exception as e:
                    logger.error(f'Failed to load config file {self._config_file}: {e}')

            self._load_from_env()

    def _load_from_file(self, filepath: str):
        """Load configuration from YAML or JSON file"""
        path = Path(filepath)

        with open(filepath, 'r') as f:
            if path.suffix in ['.yaml', '.yml']:
                file_config = yaml.safe_load(f) or {}
            elif path.suffix == '.json':
                file_config = json.load(f)
            else:
                raise ValueError(f'Unsupported config file format: {path.suffix}')

        self._config.update(self._flatten_dict(file_config))

    def _load_from_env(self):
        for key in RELOADABLE_KEYS:
            value = os.getenv(key)
            if value is not None:
                self._config[key] = self._parse_value(value)

    def _flatten_dict(self, d: dict, parent_key: str = '', sep: str = '_') -> dict:
        """Flatten nested dictionary with separator"""
        items = []
        for k, v in d.items():
            new_key = f'{parent_key}{sep}{k}' if parent_key else k
            if isinstance(v, dict):
                items.extend(self._flatten_dict(v, new_key, sep=sep).items())
            else:
                items.append((new_key.upper(), v))
        return dict(items)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type"""
        if value.lower() in ['true', 'yes']:
            return True
        if value.lower() in ['false', 'no']:
            return False
        return value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value.

        Checks in order:
        1. Environment variable (always fresh)
        2. In-memory config (from file or previous load)
        3. Default value
        """
        env_value = os.getenv(key)
        if env_value is not None:
            return self._parse_value(env_value)

        with self._lock:
            return self._config.get(key, default)

    def get_str(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self.get(key, default)
        if value is None or value == '':
            return default
        return str(value)

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Get boolean configuration value"""
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ['true', 'yes', '1']
        return bool(value)

    def get_list(self, key: str, default: List[str]) -> List[str]:
        """Get a list value, accepting comma separated strings"""
        value = self.get(key, None)
        if value is None:
            return list(default)
        if isinstance(value, (list, tuple)):
            return [str(v).strip() for v in value if str(v).strip()]
        parts = [p.strip() for p in str(value).split(',')]
        return [p for p in parts if p] or list(default)

    def is_development(self) -> bool:
        """Whether detailed error payloads may be returned to clients"""
        return str(self.get('ENV', '') or '').lower() == 'development'

    def set(self, key: str, value: Any):
        """
        Set configuration value (in-memory only).

        Note: Does not modify environment or file.
        """
        with self._lock:
            old_value = self._config.get(key)
            self._config[key] = value

            if old_value != value:
                self._trigger_callbacks(key, old_value, value)

    def register_callback(self, key: str, callback: Callable[[Any, Any], None]):
        """
        Register callback for configuration changes.

        Callback signature: callback(old_value, new_value)
        """
        with self._lock:
            if key not in self._callbacks:
                self._callbacks[key] = []
            self._callbacks[key].append(callback)
            logger.debug(f'Registered callback for config key: {key}')

    def _trigger_callbacks(self, key: str, old_value: Any, new_value: Any):
        callbacks = self._callbacks.get(key, [])
        for callback in callbacks:
            try:
                callback(old_value, new_value)
            except Exception as e:
                logger.error(f'Error in config callback for {key}: {e}', exc_info=True)

    def reload(self):
        """Reload configuration from file and environment."""
        logger.info('Reloading configuration...')

        with self._lock:
            old_config = self._config.copy()

            if self._config_file and os.path.exists(self._config_file):
                try:
                    self._load_from_file(self._config_file)
                    logger.info(f'Reloaded configuration from {self._config_file}')
                except Exception as e:
                    logger.error(f'Failed to reload config file: {e}')

            self._load_from_env()

            for key in set(old_config.keys()) | set(self._config.keys()):
                old_value = old_config.get(key)
                new_value = self._config.get(key)
                if old_value != new_value:
                    logger.info(f'Config changed: {key} = {old_value} -> {new_value}')
                    self._trigger_callbacks(key, old_value, new_value)

        logger.info('Configuration reload complete')

    def dump(self) -> Dict[str, Any]:
        """Dump current configuration (for debugging)"""
        with self._lock:
            config = self._config.copy()
            for key in config.keys():
                env_value = os.getenv(key)
                if env_value is not None:
                    config[key] = self._parse_value(env_value)
            return config


env_config = EnvConfig()
