"""
Configuration loader with priority: env > CLI > TOML > defaults
"""
import os
import tomllib
from pathlib import Path
from typing import Dict, Any, Optional

from ...core.constants import ENV_PREFIX
from ...core.exceptions import ConfigError
from ...domain.transfer.models import OrchestratorConfig


class ConfigLoader:
    """Configuration loader with priority support"""
    
    # Environment variable -> config key
    ENV_MAPPINGS = {
        f"{ENV_PREFIX}COMPLETION_DELAY": "completion_delay",
        f"{ENV_PREFIX}NOTIFICATION_LIMIT": "notification_limit",
        f"{ENV_PREFIX}HISTORY_DIR": "history_dir",
        f"{ENV_PREFIX}RECORD_HISTORY": "record_history",
    }
    
    def load_toml(self, path: Path) -> Dict[str, Any]:
        """
        Load TOML configuration file.
        
        Settings may sit at the top level or under an ``[orchestrator]``
        table.
        """
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")
        
        try:
            data = tomllib.loads(path.read_text(encoding='utf-8'))
        except Exception as e:
            raise ConfigError(f"Failed to parse TOML configuration: {e}") from e
        
        section = data.get("orchestrator", data)
        if not isinstance(section, dict):
            raise ConfigError("[orchestrator] must be a table")
        return section
    
    def load_env(self, environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """Load configuration from environment variables"""
        environ = os.environ if environ is None else environ
        config = {}
        for env_key, config_key in self.ENV_MAPPINGS.items():
            value = environ.get(env_key)
            if value:
                config[config_key] = self._convert_value(value)
        return config
    
    def _convert_value(self, value: str) -> Any:
        """Convert string value to appropriate type"""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False
        
        try:
            return int(value)
        except ValueError:
            pass
        
        try:
            return float(value)
        except ValueError:
            pass
        
        return value
    
    def merge_configs(self, *configs: Dict[str, Any]) -> Dict[str, Any]:
        """Merge configurations, later ones override earlier ones"""
        result: Dict[str, Any] = {}
        for config in configs:
            result.update({k: v for k, v in config.items() if v is not None})
        return result
    
    def load(
        self,
        toml_path: Optional[Path] = None,
        cli_overrides: Optional[Dict[str, Any]] = None,
        use_env: bool = True,
        environ: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        Load configuration with priority: env > CLI > TOML > defaults
        
        Args:
            toml_path: Path to TOML configuration file
            cli_overrides: CLI parameter overrides
            use_env: Whether to load from environment variables
            environ: Environment mapping (defaults to os.environ)
        
        Returns:
            Merged configuration dictionary
        """
        configs = []
        
        if toml_path:
            configs.append(self.load_toml(toml_path))
        
        if cli_overrides:
            configs.append(cli_overrides)
        
        if use_env:
            env_config = self.load_env(environ)
            if env_config:
                configs.append(env_config)
        
        return self.merge_configs(*configs)


def load_orchestrator_config(
    toml_path: Optional[Path] = None,
    cli_overrides: Optional[Dict[str, Any]] = None,
    use_env: bool = True,
    environ: Optional[Dict[str, str]] = None,
) -> OrchestratorConfig:
    """
    Build a validated ``OrchestratorConfig`` from all configuration sources.
    
    Raises:
        ConfigError: If a source cannot be read or a value is invalid
    """
    data = ConfigLoader().load(toml_path, cli_overrides, use_env, environ)
    try:
        config = OrchestratorConfig.from_dict(data)
    except TypeError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
    if not isinstance(config.completion_delay, (int, float)) or isinstance(config.completion_delay, bool):
        raise ConfigError(f"completion_delay must be a number, got {config.completion_delay!r}")
    if not isinstance(config.notification_limit, int) or isinstance(config.notification_limit, bool):
        raise ConfigError(f"notification_limit must be an integer, got {config.notification_limit!r}")
    config.validate()
    return config
