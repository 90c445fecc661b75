# thumbnail_ingest/constants.py
"""
Application-wide constants.

Defaults here back the fields in ``config.Settings``; modules should read the
effective values from settings rather than importing these directly.
"""

# =============================================================================
# STORE
# =============================================================================

DEFAULT_DATABASE_URL = "postgresql://localhost:5432/image_processor"

IMAGES_TABLE = "images"
FAILED_IMAGES_TABLE = "failed_images"

# =============================================================================
# INPUT
# =============================================================================

DEFAULT_CSV_PATH = "./data/data.csv"
DEFAULT_MAX_FILE_SIZE = 120 * 1024 * 1024  # 120 MiB

CSV_DELIMITER = ","
REQUIRED_CSV_COLUMNS = ("id", "url", "index")

# =============================================================================
# BATCH PROCESSING
# =============================================================================

DEFAULT_BATCH_SIZE = 50
DEFAULT_MAX_RETRY_ATTEMPTS = 3

# =============================================================================
# THUMBNAILS
# =============================================================================

DEFAULT_THUMBNAIL_SIZE = 100
DEFAULT_THUMBNAIL_QUALITY = 85
DEFAULT_FETCH_TIMEOUT_SECONDS = 5.0
DOWNLOAD_CHUNK_SIZE = 64 * 1024

# =============================================================================
# LOGGING
# =============================================================================

DEFAULT_LOG_DIRECTORY = "./logs"
LOG_ROTATION = "10 MB"
LOG_RETENTION = "14 days"

# =============================================================================
# PROCESS EXIT CODES
# =============================================================================

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130
