"""Global constants for deploy-pilot"""

import re

APP_NAME = "deploy-pilot"
LOG_FORMAT = "%(message)s"

# Project identification
PROJECT_CONFIG_FILE = ".deploy-pilot.yaml"

# Local build layout
DEFAULT_SOURCE_DIR = "."
DEFAULT_ARTIFACT_DIR = ".deploy-pilot/artifacts"
DEFAULT_BUILD_COMMANDS = ["npm ci", "npm run build"]
DEFAULT_BUILD_OUTPUT = "dist"
DEFAULT_MANIFEST_FILES = ["package.json", "package-lock.json"]
DEFAULT_SUPERVISOR_CONFIG = "ecosystem.config.js"
DEFAULT_RUNTIME_PATHS = []
DEFAULT_ENV_TEMPLATE = ".env.example"
DEFAULT_KEEP_ARTIFACTS = 3

# Never packed into an artifact
ARTIFACT_EXCLUDE_PATTERNS = [
    "node_modules",
    ".git",
    "__pycache__",
    ".DS_Store",
    "*.log",
]

ARTIFACT_FILE_PATTERN = "release-{artifact_id}.tar.gz"

# Remote host layout
DEFAULT_APP_DIR = "/var/www/app"
DEFAULT_UPLOAD_DIR = "/tmp"
DEFAULT_SSH_PORT = 22
BACKUPS_DIR = "backups"
LOGS_DIR = "logs"
ENV_FILE = ".env"
UPLOAD_PART_SUFFIX = ".part"

# Snapshots
SNAPSHOT_PREFIX = "backup-"
SNAPSHOT_SUFFIX = ".tar.gz"
SNAPSHOT_TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"
SNAPSHOT_NAME_PATTERN = re.compile(r"^backup-(?P<timestamp>\d{8}-\d{6})\.tar\.gz$")
SNAPSHOT_RETENTION = 5

# Release
DEFAULT_OWNERSHIP_COMMAND = "sudo chown -R {user}:{user} {path}"
DEFAULT_INSTALL_COMMAND = "npm ci --omit=dev"
DEFAULT_ENV_VALUES = {
    "NODE_ENV": "production",
    "PORT": "8000",
}

# Process supervisor
DEFAULT_PROCESS_NAME = "app"
DEFAULT_SUPERVISOR_ENV = "production"
DEFAULT_PM2_BINARY = "pm2"

# Health verification
HEALTH_SETTLE_SECONDS = 10
HEALTH_ATTEMPTS = 2
HEALTH_INTERVAL_SECONDS = 5
HEALTH_REQUEST_TIMEOUT = 10
HEALTH_ACCEPTED_STATUSES = (200, 301, 302)
HEALTH_UNREACHABLE_STATUS = 0

# Environment variables
ENV_CONFIG_PATH = "DEPLOY_PILOT_CONFIG"
ENV_LOG_LEVEL = "DEPLOY_PILOT_LOG_LEVEL"
ENV_HOST = "DEPLOY_HOST"
ENV_USER = "DEPLOY_USER"
ENV_SSH_KEY = "DEPLOY_SSH_KEY"
ENV_KNOWN_HOSTS = "DEPLOY_KNOWN_HOSTS"

# Pipeline exit status
EXIT_SUCCESS = 0
EXIT_FAILURE = 1


# Error codes
class ErrorCode:
    BUILD_FAILED = "DP001"
    TRANSPORT_FAILED = "DP002"
    RELEASE_FAILED = "DP003"
    HEALTH_CHECK_FAILED = "DP004"
    ROLLBACK_FAILED = "DP005"
    SNAPSHOT_CREATE_FAILED = "DP006"
    PROCESS_RELOAD_FAILED = "DP007"
    CONFIG_FORMAT_ERROR = "DP008"


# Display constants
EMOJI_SUCCESS = "✓"
EMOJI_ERROR = "✗"
EMOJI_SKIPPED = "–"

MSG_STAGE_PASSED = f"{EMOJI_SUCCESS} {{stage}}: {{message}}"
MSG_STAGE_FAILED = f"{EMOJI_ERROR} {{stage}}: {{message}}"
MSG_STAGE_SKIPPED = f"{EMOJI_SKIPPED} {{stage}}: {{message}}"
