"""
Configuration settings for the User Management Backend
"""

import os
import logging

logger = logging.getLogger(__name__)

# Environment configuration
ENV = os.getenv("ENV", "PROD")  # PROD or QA
PORT = int(os.getenv("PORT", 8080))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Persistence configuration
USER_STORE = os.getenv("USER_STORE", "postgres").lower()  # postgres or memory
DATABASE_URL = os.getenv("DATABASE_URL")
DB_POOL_MIN_SIZE = int(os.getenv("DB_POOL_MIN_SIZE", 2))
DB_POOL_MAX_SIZE = int(os.getenv("DB_POOL_MAX_SIZE", 10))

SUPPORTED_USER_STORES = ("postgres", "memory")

logger.info(f"Environment: {ENV}, user store: {USER_STORE}")

# Validate required environment variables
if USER_STORE not in SUPPORTED_USER_STORES:
    raise ValueError(f"USER_STORE must be one of {SUPPORTED_USER_STORES}, got '{USER_STORE}'")
if USER_STORE == "postgres" and not DATABASE_URL:
    raise ValueError("DATABASE_URL environment variable is required when USER_STORE=postgres")

# CORS settings
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]
