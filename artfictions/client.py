"""Dataset fetcher for remote URLs and local JSON files."""
import json
import time
import random
import requests
from pathlib import Path
from typing import Optional, Any
import logging

logger = logging.getLogger(__name__)


class DatasetClient:
    """Fetches the novels JSON document with timeouts and optional retries."""

    def __init__(
        self,
        timeout: int = 10,
        max_retries: int = 1,
        base_backoff: float = 1.0,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize dataset client.

        Args:
            timeout: Request timeout in seconds
            max_retries: Maximum number of attempts (1 = single attempt)
            base_backoff: Base delay for exponential backoff
            session: Optional pre-built session
        """
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.base_backoff = base_backoff

        # Create session for connection pooling
        self.session = session or requests.Session()

    def fetch(self, source: str) -> Optional[Any]:
        """
        Fetch and parse the dataset.

        Args:
            source: HTTP(S) URL or local file path

        Returns:
            Parsed JSON value or None if the load failed
        """
        if source.startswith(("http://", "https://")):
            return self._fetch_url_with_retry(source)
        return self._read_file(source)

    def _read_file(self, path: str) -> Optional[Any]:
        """Read a local JSON file."""
        try:
            # utf-8-sig also accepts files saved with a byte order mark
            with open(Path(path), "r", encoding="utf-8-sig") as f:
                data = json.load(f)
            logger.info(f"Loaded dataset file: {path}")
            return data
        except OSError as e:
            logger.error(f"Cannot read dataset file {path}: {e}")
            return None
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Invalid JSON in {path}: {e}")
            return None

    def _fetch_url_with_retry(self, url: str) -> Optional[Any]:
        """
        Make HTTP request with retry logic.

        Args:
            url: Dataset URL

        Returns:
            Parsed JSON or None if all attempts failed
        """
        for attempt in range(self.max_retries):
            try:
                logger.info(f"Request attempt {attempt + 1}/{self.max_retries}: {url}")

                response = self.session.get(url, timeout=self.timeout)

                if response.status_code == 200:
                    try:
                        return response.json()
                    except ValueError as e:
                        # A malformed body will not improve on retry
                        logger.error(f"Invalid JSON from {url}: {e}")
                        return None

                elif response.status_code == 429 or response.status_code >= 500:
                    logger.warning(f"Dataset load failed ({response.status_code}) on attempt {attempt + 1}")
                    if attempt < self.max_retries - 1:
                        self._backoff(attempt)
                        continue

                elif response.status_code >= 400:
                    # Client error - don't retry
                    logger.error(f"Dataset load failed ({response.status_code}): {url}")
                    return None

                else:
                    # 204, unfollowed redirects: nothing usable to parse
                    logger.error(f"Unexpected status ({response.status_code}) for {url}")
                    return None

            except requests.exceptions.Timeout:
                logger.warning(f"Timeout on attempt {attempt + 1}")
                if attempt < self.max_retries - 1:
                    self._backoff(attempt)
                    continue

            except requests.exceptions.ConnectionError as e:
                logger.warning(f"Connection error on attempt {attempt + 1}: {e}")
                if attempt < self.max_retries - 1:
                    self._backoff(attempt)
                    continue

            except requests.exceptions.RequestException as e:
                # Redirect loops, bad URLs, broken chunked bodies
                logger.error(f"Request failed: {e}")
                return None

        logger.error(f"All {self.max_retries} attempts failed")
        return None

    def _backoff(self, attempt: int):
        """
        Sleep with exponential backoff and jitter.

        Args:
            attempt: Current attempt number (0-indexed)
        """
        delay = self.base_backoff * (2 ** attempt)
        jitter = random.uniform(0, delay)
        total_delay = delay + jitter

        logger.info(f"Backing off for {total_delay:.2f} seconds")
        time.sleep(total_delay)

    def close(self):
        """Close the session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
