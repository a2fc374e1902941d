"""
SSRF Protection Module

Validates URLs before making HTTP requests to prevent Server-Side Request Forgery attacks.
Blocks access to localhost, private IPs, and non-http(s) schemes.
"""

import ipaddress
import logging
import socket
from urllib.parse import urlparse

import requests

from constants import BROWSER_USER_AGENT

logger = logging.getLogger(__name__)

LOCALHOST_ALIASES = {
    'localhost', 'localhost.localdomain',
    '127.0.0.1', '::1', '0.0.0.0',
    '[::1]', '[0:0:0:0:0:0:0:1]'
}


class SSRFError(Exception):
    """Raised when a URL fails SSRF validation."""
    pass


def is_private_ip(ip_str):
    """Check if an IP address is private, loopback, or otherwise internal."""
    try:
        ip = ipaddress.ip_address(ip_str)
    except ValueError:
        return True  # Invalid IP, treat as unsafe
    return (
        ip.is_private or
        ip.is_loopback or
        ip.is_reserved or
        ip.is_link_local or
        ip.is_multicast or
        ip.is_unspecified
    )


def is_safe_url(url):
    """
    Validate that a URL is safe to fetch.

    Returns (is_safe, error_message) tuple.

    Checks:
    - Scheme is http or https only
    - Host resolves to a public IP (not private/loopback)
    - Not targeting localhost or internal services
    """
    if not url:
        return False, "Empty URL"

    try:
        parsed = urlparse(url)
    except ValueError:
        return False, "Invalid URL format"

    if parsed.scheme not in ('http', 'https'):
        return False, f"Invalid scheme: {parsed.scheme}. Only http and https are allowed."

    hostname = parsed.hostname
    if not hostname:
        return False, "No hostname in URL"

    if hostname.lower() in LOCALHOST_ALIASES:
        return False, "Cannot access localhost"

    # Check for IP addresses directly in URL
    try:
        ip = ipaddress.ip_address(hostname)
        if is_private_ip(str(ip)):
            return False, f"Cannot access private/internal IP: {hostname}"
    except ValueError:
        # Not an IP address, resolve hostname
        pass

    try:
        resolved_ips = socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except socket.gaierror:
        return False, f"Cannot resolve hostname: {hostname}"

    for _family, _socktype, _proto, _canonname, sockaddr in resolved_ips:
        ip_str = sockaddr[0]
        if is_private_ip(ip_str):
            return False, f"Hostname resolves to private/internal IP: {ip_str}"

    return True, None


def safe_fetch(url, headers=None, params=None, timeout=15, max_size=10*1024*1024):
    """
    Fetch a URL with SSRF protection and size limits.

    Args:
        url: The URL to fetch
        headers: Optional HTTP headers dict
        params: Optional query string parameters
        timeout: Request timeout in seconds (default 15)
        max_size: Maximum response size in bytes (default 10MB)

    Returns:
        requests.Response object with its content fully read

    Raises:
        SSRFError: If the URL fails security validation
        requests.RequestException: For network errors and non-2xx responses
    """
    is_safe, error = is_safe_url(url)
    if not is_safe:
        logger.warning("Blocked fetch of %s: %s", url, error)
        raise SSRFError(error)

    if headers is None:
        headers = {'User-Agent': BROWSER_USER_AGENT}

    logger.debug("Fetching %s", url)
    response = requests.get(url, headers=headers, params=params, timeout=timeout, stream=True)
    response.raise_for_status()

    content_length = response.headers.get('content-length')
    if content_length and int(content_length) > max_size:
        response.close()
        raise SSRFError(f"Response too large: {content_length} bytes (max {max_size})")

    content = b''
    for chunk in response.iter_content(chunk_size=8192):
        content += chunk
        if len(content) > max_size:
            response.close()
            raise SSRFError(f"Response exceeded maximum size of {max_size} bytes")

    # Replace content in response so .text/.json() work after streaming
    response._content = content
    return response
