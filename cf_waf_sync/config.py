import os
import logging
from pathlib import Path
from datetime import datetime
from typing import Dict, Optional, Union

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.cloudflare.com/client/v4"
DEFAULT_RULES_FILE = "waf_rules.json"
DEFAULT_REQUEST_TIMEOUT = 30


def setup_logging(verbose: bool = False, log_dir: Union[str, Path] = 'logs') -> logging.Logger:
    """Configure logging settings."""
    # Create logs directory if it doesn't exist
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    log_file = log_dir / f'cf_waf_sync_{timestamp}.log'

    if verbose:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, os.getenv('LOG_LEVEL', 'INFO').upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_file)
        ]
    )
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger().setLevel(log_level)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging initialized. Log file: {log_file}")
    logger.debug(f"Python logger level: {logging.getLevelName(logger.getEffectiveLevel())}")

    return logger


def load_env_file(env_file: Union[str, Path]) -> bool:
    """
    Load KEY=value pairs from an env file into the process environment.

    Blank lines and lines starting with '#' are skipped and each line is split
    on the first '='. Values are not validated here.

    Returns:
        True if the file was found and loaded
    """
    env_path = Path(env_file)
    if not env_path.is_file():
        logger.warning(f"Env file not found: {env_path}")
        return False

    loaded = load_dotenv(env_path, override=True)
    logger.debug(f"Loaded environment from {env_path}")
    return loaded


class Config:
    """Configuration for talking to the Cloudflare API and locating rule templates."""

    def __init__(
        self,
        api_token: Optional[str] = None,
        base_url: Optional[str] = None,
        rules_file: Optional[Union[str, Path]] = None,
        env_file: Optional[Union[str, Path]] = None,
        request_timeout: Optional[int] = None,
    ):
        """Explicit arguments win over environment variables."""
        if env_file is not None:
            load_env_file(env_file)

        self.api_token = api_token or os.getenv('CLOUDFLARE_API_TOKEN')
        self.base_url = (base_url or os.getenv('CLOUDFLARE_BASE_URL') or DEFAULT_BASE_URL).rstrip('/')
        self.rules_file = Path(rules_file or os.getenv('WAF_RULES_FILE') or DEFAULT_RULES_FILE)
        self.request_timeout = request_timeout or self._read_request_timeout()

        # An unusable token surfaces as the API's unauthorized response
        if not self.api_token:
            logger.warning("CLOUDFLARE_API_TOKEN is not set; API calls will be rejected")

        self.headers = self._get_auth_headers()

    def _read_request_timeout(self) -> int:
        """Read CLOUDFLARE_REQUEST_TIMEOUT, falling back to the default on bad input."""
        raw_timeout = os.getenv('CLOUDFLARE_REQUEST_TIMEOUT')
        if not raw_timeout:
            return DEFAULT_REQUEST_TIMEOUT
        try:
            return int(raw_timeout)
        except ValueError:
            logger.warning(
                f"Invalid CLOUDFLARE_REQUEST_TIMEOUT {raw_timeout!r}; using {DEFAULT_REQUEST_TIMEOUT}s"
            )
            return DEFAULT_REQUEST_TIMEOUT

    def _get_auth_headers(self) -> Dict[str, str]:
        """Build bearer-token authentication headers."""
        return {
            'Authorization': f'Bearer {self.api_token}',
            'Content-Type': 'application/json'
        }

    def __str__(self) -> str:
        return (
            f"cf-waf-sync Configuration:\n"
            f"- Base URL: {self.base_url}\n"
            f"- Rules File: {self.rules_file}\n"
            f"- Request Timeout: {self.request_timeout}s\n"
            f"- Token Set: {'yes' if self.api_token else 'no'}"
        )

    def __repr__(self) -> str:
        return (
            f"Config("
            f"base_url='{self.base_url}', "
            f"rules_file='{self.rules_file}', "
            f"request_timeout={self.request_timeout}"
            f")"
        )
