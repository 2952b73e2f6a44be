"""
Runtime configuration for the catalog sync and solved-set pipeline.
Values come from the environment (or a .env file) with sensible defaults.
"""

import os
import sys

from dotenv import load_dotenv
from loguru import logger

# Load environment variables from .env file
load_dotenv()

# Remote catalog (LeetCode GraphQL)
CATALOG_API_URL = os.getenv("CATALOG_API_URL", "https://leetcode.com/graphql")
CATALOG_PAGE_SIZE = int(os.getenv("CATALOG_PAGE_SIZE", "100"))
CATALOG_TIMEOUT = float(os.getenv("CATALOG_TIMEOUT", "30"))

# Delay between page fetches (in seconds). The remote has an implicit rate limit.
CATALOG_PAGE_DELAY = float(os.getenv("CATALOG_PAGE_DELAY", "1.0"))

# Stop paginating once the cumulative offset goes past this value
CATALOG_MAX_OFFSET = int(os.getenv("CATALOG_MAX_OFFSET", "5000"))

# Retries per page on transport failures
CATALOG_MAX_RETRIES = int(os.getenv("CATALOG_MAX_RETRIES", "3"))
CATALOG_RETRY_DELAY = float(os.getenv("CATALOG_RETRY_DELAY", "2.0"))

# Solved set
DEFAULT_OWNER_ID = os.getenv("DEFAULT_OWNER_ID", "default-user")
SOLVED_SNAPSHOT_PATH = os.getenv("SOLVED_SNAPSHOT_PATH", "./solved.json")

# Statistics
STATS_TOP_N = int(os.getenv("STATS_TOP_N", "10"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def configure_logging(level: str = None) -> None:
    """Route loguru output to stderr at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level=(level or LOG_LEVEL).upper())
