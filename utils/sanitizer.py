"""
Input Sanitization Module

Cleans user input and externally fetched data before it is stored.
Output is JSON rendered by the client, so text is cleaned rather than
HTML-escaped here.
"""

import re
from urllib.parse import urlparse

CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]')

DANGEROUS_SCHEMES = {
    'javascript', 'data', 'vbscript', 'file',
    'blob', 'about', 'chrome', 'moz-extension'
}


def sanitize_text(text, max_length=10000, single_line=False):
    """
    Clean a piece of text for storage.

    Removes control characters and null bytes, strips surrounding
    whitespace and truncates to max_length. With single_line, runs of
    whitespace (including newlines) collapse to one space.

    Args:
        text: The text to sanitize (can be None)
        max_length: Maximum allowed length (default 10000)
        single_line: Collapse all whitespace (default False)

    Returns:
        Sanitized string, empty if text is None
    """
    if text is None:
        return ''

    if not isinstance(text, str):
        text = str(text)

    text = CONTROL_CHARS.sub('', text)
    if single_line:
        text = re.sub(r'\s+', ' ', text)
    text = text.strip()

    if len(text) > max_length:
        text = text[:max_length]

    return text


def sanitize_url(url):
    """
    Sanitize a URL by rejecting dangerous schemes.

    Prevents javascript:, data:, vbscript:, and other dangerous URL schemes
    that could execute code when used in href or src attributes. Site
    relative paths (like the placeholder image) are allowed.

    Args:
        url: The URL to validate (can be None)

    Returns:
        The URL if safe, empty string if unsafe or invalid
    """
    if not url or not isinstance(url, str):
        return ''

    url = url.strip()

    try:
        parsed = urlparse(url)
    except ValueError:
        return ''

    scheme = parsed.scheme.lower()
    if scheme and scheme not in ('http', 'https'):
        return ''

    # Additional check for encoded javascript:
    url_lower = url.lower()
    for dangerous in DANGEROUS_SCHEMES:
        if dangerous + ':' in url_lower:
            return ''
        if dangerous.replace('a', '%61') in url_lower:
            return ''

    return url


def sanitize_title(title, max_length=200, default='Untitled Recipe'):
    """Sanitize a recipe title for safe storage and display."""
    title = sanitize_text(title, max_length=max_length, single_line=True)
    return title or default


def sanitize_safe_redirect(target, default='/'):
    """Only allow same-origin absolute paths as redirect targets."""
    if not target or not isinstance(target, str):
        return default
    if not target.startswith('/') or target.startswith('//') or '\\' in target:
        return default
    return target


def safe_int(value, default=None, min_val=None, max_val=None):
    """Safely parse an integer value with optional bounds."""
    if value is None or value == '' or isinstance(value, bool):
        return default
    try:
        result = int(float(value))
    except (ValueError, TypeError, OverflowError):
        return default
    if min_val is not None:
        result = max(min_val, result)
    if max_val is not None:
        result = min(max_val, result)
    return result
