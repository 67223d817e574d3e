"""Configuration management."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration."""

    # Dataset
    SOURCE = os.getenv("ARTFICTIONS_SOURCE", "artfictions_novels.json")

    # HTTP
    DEFAULT_TIMEOUT = int(os.getenv("DEFAULT_TIMEOUT", "10"))
    DEFAULT_MAX_RETRIES = int(os.getenv("DEFAULT_MAX_RETRIES", "1"))

    # Aggregation defaults
    DEFAULT_TOP_K = int(os.getenv("DEFAULT_TOP_K", "20"))
    DEFAULT_TREND_K = int(os.getenv("DEFAULT_TREND_K", "5"))
    DEFAULT_SMOOTHING = int(os.getenv("DEFAULT_SMOOTHING", "3"))

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
