"""Health check script for Docker container."""

import sys
import logging

from flight_search.client import AmadeusClient
from flight_search.config import Settings, validate_credentials
from flight_search.errors import ClassifiedError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

CONFIG_INSTRUCTION = "   Set AMADEUS_API_KEY and AMADEUS_API_SECRET or edit data/config.yaml"


def main():
    """Check that credentials are configured and a token can be obtained."""
    try:
        settings = Settings()
    except Exception as e:
        logger.error(f"[ERROR] UNHEALTHY: Failed to load configuration: {e}")
        sys.exit(1)

    is_valid, invalid_vars = validate_credentials(settings)
    if not is_valid:
        logger.error(f"[ERROR] UNHEALTHY: Missing credentials: {', '.join(invalid_vars)}")
        logger.error(CONFIG_INSTRUCTION)
        sys.exit(1)

    client = AmadeusClient.from_settings(settings)
    try:
        client.token_manager.get_valid_token(timeout=settings.request_timeout)
    except ClassifiedError as e:
        logger.error(f"[ERROR] UNHEALTHY: Token request failed: {e}")
        sys.exit(1)
    finally:
        client.close()

    logger.info("[OK] HEALTHY: Upstream token obtained")
    sys.exit(0)


if __name__ == "__main__":
    main()
