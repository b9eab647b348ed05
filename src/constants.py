"""Constants used in the project."""

import os
from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FAILURE = 1
    CONNECTION_ERROR = 2
    USAGE = 64
    INTERRUPTED = 130


class RuntimeCommands(Enum):
    """Commands that can be dispatched to an installed runtime.

    Args:
        Enum (string): Commands shipped in the runtime's bin directory.
    """

    NODE = "node"
    NPM = "npm"
    NPX = "npx"
    COREPACK = "corepack"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    NVS_HOME = os.path.join(os.path.expanduser("~"), ".nvs")
    MIRROR_URL = "https://nodejs.org/dist/"
    MAX_WORKERS = (os.cpu_count() or 1) * 4
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    CONNECT_TIMEOUT = 5  # Connect timeout for download range requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    HTTP_CACHE_TTL_SEC = 300
    DOWNLOAD_CHUNK_BYTES = 64 * 1024

    VERSIONS_DIR = "versions"
    BIN_DIR = "bin"
    GLOBAL_VERSION_FILE = "global_version"
    CONFIG_FILE = "config.yml"
    NODE_VERSION_FILE = ".node-version"
    PACKAGE_JSON_FILE = "package.json"

    AUTO_VERSION = "auto"
    REMOTE_VERSION_PATTERN = r"^v[0-9]{1,2}\.[0-9]{1,2}\.[0-9]{1,2}/$"
    ARCHIVE_SUFFIX = ".tar.gz"
    SUPPORTED_COMMANDS = [cmd.value for cmd in RuntimeCommands]

    LOG_FORMAT = "[nvs] [%(levelname)s] %(message)s"
    USER_AGENT = "nvs/0.4.0"
