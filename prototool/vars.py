"""Static values used across the package."""

VERSION = "1.0.0-dev"

# Default protoc release to download.
DEFAULT_PROTOC_VERSION = "3.6.1"

# Filled in by release builds; empty otherwise.
GIT_COMMIT = ""
BUILT_TIMESTAMP = ""