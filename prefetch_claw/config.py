"""
Configuration settings for the prefetch collector and command-line tools.
"""

import logging

# --------- Collector ---------
DEFAULT_PREFETCH_DIR = "C:\\Windows\\Prefetch"
DEFAULT_DB_NAME = "prefetch_data.db"
FAILED_LOG_NAME = "failed_prefetch_files.txt"
PREFETCH_EXTENSION = ".pf"

COLLECTOR_CONFIG = {
    'strict_signature': False,   # True rejects signatures other than 'SCCA'
    'skip_duplicates': True,     # Keep the first row for a filename+hash pair
    'progress_bar': True,
    'progress_unit': "file",
    'progress_desc': "[Prefetch] Parsing",
}

# --------- Logging ---------
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
DEFAULT_LOG_LEVEL = logging.WARNING
LOGGER_NAME = 'prefetch_claw'

# --------- Report ---------
DISPLAY_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
JSON_INDENT = 2
