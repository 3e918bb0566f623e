"""
HTTP helpers shared by the release fetchers.
"""

from typing import Any, Dict, Optional

import requests

# Default timeout for a single HTTP request, in seconds
DEFAULT_TIMEOUT_SEC = 30


def http_get(session: requests.Session, url: str, params: Optional[Dict[str, Any]] = None,
             headers: Optional[Dict[str, str]] = None, timeout: int = DEFAULT_TIMEOUT_SEC) -> requests.Response:
    """
    Send an HTTP GET request through a session and return the response.

    Args:
        session: Session used to send the request
        url: URL to fetch
        params: Optional query parameters
        headers: Optional HTTP headers
        timeout: Request timeout in seconds

    Returns:
        The response, already checked for an error status

    Raises:
        requests.HTTPError: If the server answers with an error status
    """
    response = session.get(url, params=params, headers=headers, timeout=timeout)
    response.raise_for_status()
    return response
