"""Configuration data models"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any

from ..constants import (
    DEFAULT_SOURCE_DIR,
    DEFAULT_ARTIFACT_DIR,
    DEFAULT_BUILD_COMMANDS,
    DEFAULT_BUILD_OUTPUT,
    DEFAULT_MANIFEST_FILES,
    DEFAULT_SUPERVISOR_CONFIG,
    DEFAULT_RUNTIME_PATHS,
    DEFAULT_ENV_TEMPLATE,
    DEFAULT_KEEP_ARTIFACTS,
    DEFAULT_APP_DIR,
    DEFAULT_UPLOAD_DIR,
    DEFAULT_SSH_PORT,
    DEFAULT_OWNERSHIP_COMMAND,
    DEFAULT_INSTALL_COMMAND,
    DEFAULT_ENV_VALUES,
    DEFAULT_PROCESS_NAME,
    DEFAULT_SUPERVISOR_ENV,
    DEFAULT_PM2_BINARY,
    HEALTH_SETTLE_SECONDS,
    HEALTH_ATTEMPTS,
    HEALTH_INTERVAL_SECONDS,
    HEALTH_REQUEST_TIMEOUT,
    HEALTH_ACCEPTED_STATUSES,
    SNAPSHOT_RETENTION,
    BACKUPS_DIR,
    LOGS_DIR,
    ENV_FILE,
    ENV_HOST,
    ENV_USER,
    ENV_SSH_KEY,
    ENV_KNOWN_HOSTS,
)


@dataclass
class BuildConfig:
    """How the artifact is built and what goes into it"""

    source_dir: str = DEFAULT_SOURCE_DIR
    artifact_dir: str = DEFAULT_ARTIFACT_DIR
    commands: List[str] = field(default_factory=lambda: list(DEFAULT_BUILD_COMMANDS))
    output_dir: str = DEFAULT_BUILD_OUTPUT
    manifest_files: List[str] = field(default_factory=lambda: list(DEFAULT_MANIFEST_FILES))
    supervisor_config: str = DEFAULT_SUPERVISOR_CONFIG
    runtime_paths: List[str] = field(default_factory=lambda: list(DEFAULT_RUNTIME_PATHS))
    env_template: Optional[str] = DEFAULT_ENV_TEMPLATE
    keep_artifacts: int = DEFAULT_KEEP_ARTIFACTS

    @property
    def required_members(self) -> List[str]:
        """Paths that must exist after the build"""
        return [self.output_dir, *self.manifest_files, self.supervisor_config]

    @property
    def optional_members(self) -> List[str]:
        """Paths packed only when present"""
        members = list(self.runtime_paths)
        if self.env_template:
            members.append(self.env_template)
        return members

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "source_dir": self.source_dir,
            "artifact_dir": self.artifact_dir,
            "commands": self.commands,
            "output_dir": self.output_dir,
            "manifest_files": self.manifest_files,
            "supervisor_config": self.supervisor_config,
            "runtime_paths": self.runtime_paths,
            "env_template": self.env_template,
            "keep_artifacts": self.keep_artifacts,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BuildConfig':
        """Create from dictionary"""
        return cls(**data)


@dataclass
class RemoteConfig:
    """Layout of the deployed state on the target host"""

    app_dir: str = DEFAULT_APP_DIR
    upload_dir: str = DEFAULT_UPLOAD_DIR
    port: int = DEFAULT_SSH_PORT

    @property
    def backups_dir(self) -> str:
        return f"{self.app_dir.rstrip('/')}/{BACKUPS_DIR}"

    @property
    def logs_dir(self) -> str:
        return f"{self.app_dir.rstrip('/')}/{LOGS_DIR}"

    @property
    def env_file(self) -> str:
        return f"{self.app_dir.rstrip('/')}/{ENV_FILE}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "app_dir": self.app_dir,
            "upload_dir": self.upload_dir,
            "port": self.port,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RemoteConfig':
        """Create from dictionary"""
        return cls(**data)


@dataclass
class ReleaseConfig:
    """Commands and defaults used while releasing on the host"""

    ownership_command: Optional[str] = DEFAULT_OWNERSHIP_COMMAND
    install_command: str = DEFAULT_INSTALL_COMMAND
    env_defaults: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ENV_VALUES))
    snapshot_retention: int = SNAPSHOT_RETENTION

    def __post_init__(self):
        """Validate release configuration"""
        if self.snapshot_retention < 1:
            raise ValueError("snapshot_retention must be at least 1")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "ownership_command": self.ownership_command,
            "install_command": self.install_command,
            "env_defaults": self.env_defaults,
            "snapshot_retention": self.snapshot_retention,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ReleaseConfig':
        """Create from dictionary"""
        values = dict(data)
        if "env_defaults" in values:
            values["env_defaults"] = {
                str(k): str(v) for k, v in (values["env_defaults"] or {}).items()
            }
        return cls(**values)


@dataclass
class SupervisorConfig:
    """Process supervisor settings"""

    process_name: str = DEFAULT_PROCESS_NAME
    ecosystem_file: str = DEFAULT_SUPERVISOR_CONFIG
    environment: str = DEFAULT_SUPERVISOR_ENV
    binary: str = DEFAULT_PM2_BINARY

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "process_name": self.process_name,
            "ecosystem_file": self.ecosystem_file,
            "environment": self.environment,
            "binary": self.binary,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SupervisorConfig':
        """Create from dictionary"""
        return cls(**data)


@dataclass
class HealthCheckConfig:
    """Bounded health polling settings"""

    url: Optional[str] = None
    settle_seconds: float = HEALTH_SETTLE_SECONDS
    attempts: int = HEALTH_ATTEMPTS
    interval_seconds: float = HEALTH_INTERVAL_SECONDS
    timeout: float = HEALTH_REQUEST_TIMEOUT
    accepted_statuses: List[int] = field(default_factory=lambda: list(HEALTH_ACCEPTED_STATUSES))

    def __post_init__(self):
        """Validate health check configuration"""
        if self.attempts < 1:
            raise ValueError("Health check requires at least one attempt")

    def resolve_url(self, host: Optional[str]) -> str:
        """Return the probe URL, defaulting to the public host address"""
        if self.url:
            return self.url
        if not host:
            raise ValueError("Health check URL is not configured and host is unknown")
        return f"http://{host}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = {
            "settle_seconds": self.settle_seconds,
            "attempts": self.attempts,
            "interval_seconds": self.interval_seconds,
            "timeout": self.timeout,
            "accepted_statuses": self.accepted_statuses,
        }
        if self.url:
            data["url"] = self.url
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HealthCheckConfig':
        """Create from dictionary"""
        return cls(**data)


@dataclass
class HostCredentials:
    """Secret inputs for the target host

    Supplied out-of-band by the invoking automation. The repr hides every
    value so credentials never end up in logs or tracebacks.
    """

    host: str
    user: str
    private_key: Optional[str] = field(default=None, repr=False)
    known_hosts: Optional[str] = field(default=None, repr=False)

    def __repr__(self) -> str:
        return "HostCredentials(host='***', user='***', private_key='***')"

    @property
    def secrets(self) -> List[str]:
        """Values that must be masked in any output"""
        return [v for v in (self.host, self.user, self.private_key) if v]

    @classmethod
    def from_env(cls, env: Optional[Dict[str, str]] = None,
                 host_var: str = ENV_HOST,
                 user_var: str = ENV_USER,
                 key_var: str = ENV_SSH_KEY,
                 known_hosts_var: str = ENV_KNOWN_HOSTS) -> Optional['HostCredentials']:
        """Read credentials from environment variables

        Returns:
            HostCredentials or None when host or user are missing
        """
        env = os.environ if env is None else env
        host = env.get(host_var)
        user = env.get(user_var)
        if not host or not user:
            return None
        return cls(
            host=host,
            user=user,
            private_key=env.get(key_var),
            known_hosts=env.get(known_hosts_var),
        )


@dataclass
class PipelineConfig:
    """Complete configuration"""

    version: str = "1.0"
    project_name: str = ""
    build: BuildConfig = field(default_factory=BuildConfig)
    remote: RemoteConfig = field(default_factory=RemoteConfig)
    release: ReleaseConfig = field(default_factory=ReleaseConfig)
    supervisor: SupervisorConfig = field(default_factory=SupervisorConfig)
    health: HealthCheckConfig = field(default_factory=HealthCheckConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "version": self.version,
            "project": {"name": self.project_name},
            "build": self.build.to_dict(),
            "remote": self.remote.to_dict(),
            "release": self.release.to_dict(),
            "supervisor": self.supervisor.to_dict(),
            "health": self.health.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'PipelineConfig':
        """Create from dictionary"""
        data = data or {}
        project = data.get("project", {}) or {}
        return cls(
            version=str(data.get("version", "1.0")),
            project_name=project.get("name", ""),
            build=BuildConfig.from_dict(data.get("build", {}) or {}),
            remote=RemoteConfig.from_dict(data.get("remote", {}) or {}),
            release=ReleaseConfig.from_dict(data.get("release", {}) or {}),
            supervisor=SupervisorConfig.from_dict(data.get("supervisor", {}) or {}),
            health=HealthCheckConfig.from_dict(data.get("health", {}) or {}),
        )
