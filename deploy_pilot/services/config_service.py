"""Configuration management service"""

import os
from pathlib import Path
from typing import Optional

import yaml

from ..api.exceptions import ConfigError
from ..models.config import PipelineConfig
from ..constants import PROJECT_CONFIG_FILE, ENV_CONFIG_PATH

CONFIG_TEMPLATE = """\
# deploy-pilot configuration
version: "1.0"

project:
  name: {project_name}

build:
  source_dir: .
  commands:
    - npm ci
    - npm run build
  output_dir: dist
  manifest_files:
    - package.json
    - package-lock.json
  supervisor_config: ecosystem.config.js
  runtime_paths: []
  env_template: .env.example
  keep_artifacts: 3

remote:
  app_dir: /var/www/app
  upload_dir: /tmp
  port: 22

release:
  ownership_command: "sudo chown -R {{user}}:{{user}} {{path}}"
  install_command: npm ci --omit=dev
  snapshot_retention: 5
  env_defaults:
    NODE_ENV: production
    PORT: "8000"

supervisor:
  process_name: {project_name}
  ecosystem_file: ecosystem.config.js
  environment: production

health:
  # Defaults to http://$DEPLOY_HOST when unset
  # url: https://example.com/
  settle_seconds: 10
  attempts: 2
  interval_seconds: 5
  accepted_statuses: [200, 301, 302]
"""


class ConfigService:
    """Service for loading and initialising project configuration"""

    def __init__(self, project_root: Path, config_path: Optional[Path] = None):
        """Initialize config service

        Args:
            project_root: Project root directory
            config_path: Explicit config file (defaults to the project file)
        """
        self.project_root = Path(project_root)
        env_path = os.environ.get(ENV_CONFIG_PATH)
        if config_path is None and env_path:
            config_path = Path(env_path)
        self.config_path = Path(config_path) if config_path else self.project_root / PROJECT_CONFIG_FILE
        self._config: Optional[PipelineConfig] = None

    @property
    def config(self) -> PipelineConfig:
        """Get current configuration (lazy load)"""
        if self._config is None:
            self.load_config()
        return self._config

    def load_config(self, required: bool = False) -> PipelineConfig:
        """Load configuration from file

        Args:
            required: Fail when the file does not exist instead of using defaults

        Returns:
            Loaded configuration
        """
        if not self.config_path.exists():
            if required:
                raise ConfigError(f"Configuration file not found: {self.config_path}")
            self._config = PipelineConfig(project_name=self.project_root.resolve().name)
            return self._config

        with open(self.config_path, 'r') as f:
            content = f.read()

        # Simple environment variable expansion
        content = os.path.expandvars(content)

        try:
            data = yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self.config_path}: {e}")

        if not isinstance(data, dict):
            raise ConfigError(f"Configuration root must be a mapping: {self.config_path}")

        try:
            self._config = PipelineConfig.from_dict(data)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration in {self.config_path}: {e}")

        return self._config

    def save_config(self, config: Optional[PipelineConfig] = None) -> None:
        """Save configuration to file

        Args:
            config: Configuration to save (uses current if not provided)
        """
        if config:
            self._config = config

        if not self._config:
            raise ConfigError("No configuration to save")

        with open(self.config_path, 'w') as f:
            yaml.dump(self._config.to_dict(), f, default_flow_style=False, sort_keys=False)

    def init_config(self, project_name: Optional[str] = None, force: bool = False) -> Path:
        """Write the commented default configuration file

        Returns:
            Path of the written file
        """
        if self.config_path.exists() and not force:
            raise ConfigError(f"Configuration already exists: {self.config_path}")

        name = project_name or self.project_root.resolve().name
        self.config_path.write_text(CONFIG_TEMPLATE.format(project_name=name))
        return self.config_path
