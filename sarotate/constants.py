"""SARotate constants."""

from __future__ import annotations

# Defaults for the command line
DEFAULT_CONFIG_FILE = "config.yaml"
DEFAULT_LOG_FILE = "sarotate.log"

# Defaults for the rclone section of the config
DEFAULT_SLEEP_TIME_S = 300
DEFAULT_COMMAND_TIMEOUT_S = 120

# External binaries
RCLONE_BINARY = "rclone"
APPRISE_BINARY = "apprise"

# Internal constants
COMMAND_TIMEOUT_EXIT_CODE = 124
SUCCESS_EXIT_CODE = 0
CREDENTIAL_SUFFIX = ".json"
SERVICE_ACCOUNT_FIELD = "service_account_file"
SWAP_RESULT_MARKER = "STDOUT:"
# Quotes in notification bodies are replaced with this before dispatch
QUOTE_REPLACEMENT = "´"

TRUTHY_STRINGS = frozenset({"y", "yes", "true", "on", "1"})
