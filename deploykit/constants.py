"""
DeployKit Constants

Centralized constants for magic values, defaults, and configuration.
"""

# Input Defaults
DEFAULT_DEPLOYER_BINARY = "vendor/bin/dep"
DEFAULT_SSH_PORT = "22"
DEFAULT_WORKING_DIRECTORY = "."
VERBOSITY_LEVELS = ("v", "vv", "vvv")

# Session SSH Artifacts
SSH_DIR_NAME = ".ssh"
SSH_KEY_FILENAME = "deploykit_deploy_key"
SSH_KNOWN_HOSTS_FILENAME = "deploykit_known_hosts"
SSH_CONFIG_PREFIX = "deploykit_ssh_config_"
NULL_KNOWN_HOSTS = "/dev/null"

# File Permissions
SSH_DIR_PERMISSIONS = 0o700
SSH_KEY_PERMISSIONS = 0o600
KNOWN_HOSTS_PERMISSIONS = 0o644
SSH_CONFIG_PERMISSIONS = 0o600
EXECUTABLE_PERMISSIONS = 0o755

# Connection Multiplexing
CONTROL_SOCKET_PREFIX = "ssh_mux_"
CONTROL_SOCKET_TEMPLATE = CONTROL_SOCKET_PREFIX + "%h_%p_%r"
CONTROL_PERSIST_SECONDS = 600
SERVER_ALIVE_INTERVAL = 60
SERVER_ALIVE_COUNT_MAX = 3

# Agent Commands
SSH_AGENT_COMMAND = "ssh-agent"
SSH_ADD_COMMAND = "ssh-add"

# Environment Variables
ENV_AUTH_SOCK = "SSH_AUTH_SOCK"
ENV_AGENT_PID = "SSH_AGENT_PID"
ENV_SSH_COMMAND = "GIT_SSH_COMMAND"

# Deployer Invocation
DEPLOY_SUBCOMMAND = "deploy"
VERSION_PROBE_ARG = "--version"

# Process Handling
READ_CHUNK_SIZE = 4096
TERMINATE_GRACE_SECONDS = 5.0
STREAM_DRAIN_SECONDS = 10.0
EXIT_POLL_SECONDS = 0.05

# Outputs
OUTPUT_STATUS = "deployment-status"
OUTPUT_DEPLOYER = "deployer-output"
STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"

# Config Sources
CONFIG_FILENAME = "deploykit.yml"
ACTION_INPUT_PREFIX = "INPUT_"
ENV_PREFIX = "DEPLOYKIT"

# Log Configuration
LOG_TIME_FORMAT = "%H:%M:%S"
