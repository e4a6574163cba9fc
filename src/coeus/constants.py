"""Constants used throughout Coeus."""

# Directory names
COEUS_DIR = ".coeus"
OBJECTS_DIR = "objects"

# File names
HEAD_FILE = "HEAD"
INDEX_FILE = "index"

# Hash algorithm
HASH_ALGORITHM = "sha1"
HASH_LENGTH = 40  # SHA-1 produces 40 hex characters
MIN_PREFIX_LENGTH = 4
SHORT_HASH_LENGTH = 7

# Exit codes
EXIT_USER_ERROR = 1
EXIT_SYSTEM_ERROR = 2

# Environment variables
LOG_LEVEL_ENV = "COEUS_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
