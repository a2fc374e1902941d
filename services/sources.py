"""
Source Classification

Decides which fetcher and validation rules apply to a submitted URL.
"""

from urllib.parse import urlparse

from constants import SOURCE_WEBSITE, SOURCE_YOUTUBE, SOURCE_TIKTOK
from constants.sources import YOUTUBE_HOSTS

from .tiktok import is_tiktok_url


def _hostname(url):
    try:
        host = urlparse(url.strip()).hostname
    except (AttributeError, ValueError):
        return ''
    if not host and '://' not in url:
        # Bare "youtu.be/abc" style input without a scheme
        try:
            host = urlparse('https://' + url.strip()).hostname
        except ValueError:
            return ''
    return (host or '').lower()


def _matches(host, domains):
    return any(host == d or host.endswith('.' + d) for d in domains)


def detect_source_type(url):
    """Return 'youtube', 'tiktok' or 'website'. Unrecognised input is a website."""
    host = _hostname(url or '')
    if _matches(host, YOUTUBE_HOSTS):
        return SOURCE_YOUTUBE
    if is_tiktok_url(url):
        return SOURCE_TIKTOK
    return SOURCE_WEBSITE
