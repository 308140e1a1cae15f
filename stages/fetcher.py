"""Remote source fetching - downloads an HTML document to convert."""

import logging

import requests

from ..errors import ValidationError

logger = logging.getLogger(__name__)

# User agent to avoid basic bot detection
USER_AGENT = 'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36'


def fetch_html(url: str, timeout: int = 10, user_agent: str = USER_AGENT) -> str:
    """
    Fetch an HTML document.

    Args:
        url: http(s) URL
        timeout: Request timeout in seconds
        user_agent: User-Agent header value

    Returns:
        Decoded response body

    Raises:
        ValidationError: The URL is empty or the request failed
    """
    if not url or not url.strip():
        raise ValidationError("URL must be a non-empty string")

    headers = {
        'User-Agent': user_agent,
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
        'Accept-Language': 'en-US,en;q=0.5',
    }

    logger.info(f"Fetching {url}")
    try:
        response = requests.get(url.strip(), headers=headers, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"Request failed for {url}: {e}")
        raise ValidationError(f"Failed to fetch {url}: {e}") from e

    logger.debug(f"Fetched {len(response.text)} chars from {url}")
    return response.text
