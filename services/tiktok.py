"""
TikTok Fetcher

Scrapes a TikTok share page for the video caption. Sources are tried in
order: rehydration data, JSON-LD VideoObject, open-graph meta tags.
"""

import json
import logging
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup

from constants import BROWSER_USER_AGENT
from constants.sources import (
    TIKTOK_HOSTS, DEFAULT_TIKTOK_TITLE, MIN_TIKTOK_STRATEGY_DESCRIPTION,
)
from utils.errors import FetchError
from utils.url_validator import SSRFError, safe_fetch

logger = logging.getLogger(__name__)

REHYDRATION_SCRIPT_IDS = ('__UNIVERSAL_DATA_FOR_REHYDRATION__', 'SIGI_STATE')

FETCH_FAILED = 'Failed to fetch TikTok video information'
FETCH_FAILED_USER = (
    'TikTok videos cannot be read directly because TikTok blocks automated access. '
    'Please use the link from the bio or the website mentioned in the video.'
)


def is_tiktok_url(url):
    if not isinstance(url, str):
        return False
    url = url.strip()
    try:
        host = urlparse(url if '://' in url else 'https://' + url).hostname or ''
    except ValueError:
        return False
    host = host.lower()
    return any(host == d or host.endswith('.' + d) for d in TIKTOK_HOSTS)


def _long_enough(description):
    return len(description or '') > MIN_TIKTOK_STRATEGY_DESCRIPTION


def _item_struct(data):
    scope = data.get('__DEFAULT_SCOPE__') or {}
    detail = scope.get('webapp.video-detail') or {}
    item = (detail.get('itemInfo') or {}).get('itemStruct')
    if item:
        return item
    # Older SIGI_STATE layout keeps items keyed by id
    items = (data.get('ItemModule') or {}).values()
    return next(iter(items), None)


def from_rehydration_data(soup):
    """Strategy 1: the JSON blob TikTok embeds for client-side rehydration."""
    for script_id in REHYDRATION_SCRIPT_IDS:
        script = soup.find('script', id=script_id)
        if not script or not script.string:
            continue
        try:
            item = _item_struct(json.loads(script.string))
        except (json.JSONDecodeError, AttributeError):
            logger.debug("Unreadable TikTok %s payload", script_id)
            continue
        if not item:
            continue
        description = item.get('desc', '')
        if _long_enough(description):
            video = item.get('video') or {}
            return {
                'title': description.split('\n', 1)[0][:100] or DEFAULT_TIKTOK_TITLE,
                'description': description,
                'thumbnail': video.get('cover') or video.get('originCover') or '',
            }
    return None


def from_jsonld(soup):
    """Strategy 2: a schema.org VideoObject."""
    for script in soup.find_all('script', type='application/ld+json'):
        try:
            data = json.loads(script.string or script.get_text())
        except (json.JSONDecodeError, TypeError):
            continue
        if not isinstance(data, dict) or data.get('@type') != 'VideoObject':
            continue
        description = data.get('description') or ''
        if _long_enough(description):
            thumbnail = data.get('thumbnailUrl') or (data.get('thumbnail') or {}).get('url') or ''
            if isinstance(thumbnail, list):
                thumbnail = thumbnail[0] if thumbnail else ''
            return {
                'title': data.get('name') or data.get('headline') or DEFAULT_TIKTOK_TITLE,
                'description': description,
                'thumbnail': thumbnail,
            }
    return None


def from_meta_tags(soup):
    """Strategy 3: open-graph meta tags, accepted with any title or description."""
    def meta(prop):
        tag = soup.find('meta', attrs={'property': prop})
        return tag.get('content', '').strip() if tag else ''

    title = meta('og:title')
    description = meta('og:description')
    if not title and not description:
        return None
    return {
        'title': title or DEFAULT_TIKTOK_TITLE,
        'description': description,
        'thumbnail': meta('og:image'),
    }


STRATEGIES = (from_rehydration_data, from_jsonld, from_meta_tags)


def parse_share_page(html):
    soup = BeautifulSoup(html, 'html.parser')
    for strategy in STRATEGIES:
        info = strategy(soup)
        if info:
            logger.debug("TikTok page parsed with %s (%d chars)",
                         strategy.__name__, len(info['description']))
            return info
    return None


def fetch_tiktok_info(url, timeout=15):
    """
    Fetch {title, description, thumbnail} for a TikTok share URL.

    Raises:
        FetchError: If the page cannot be fetched or holds no caption
    """
    try:
        response = safe_fetch(url, headers={'User-Agent': BROWSER_USER_AGENT}, timeout=timeout)
    except (requests.RequestException, SSRFError) as e:
        logger.warning("Error fetching TikTok info for %s: %s", url, e)
        raise FetchError(FETCH_FAILED, user_message=FETCH_FAILED_USER, status_code=400) from e

    info = parse_share_page(response.text)
    if not info:
        logger.warning("No TikTok caption found at %s", url)
        raise FetchError(FETCH_FAILED, user_message=FETCH_FAILED_USER, status_code=400)
    return info
