"""
YouTube Fetcher

Fetches title, description and thumbnail of a YouTube video. Uses the
Data API when a key is configured, otherwise (or when the API fails)
scrapes the watch page.
"""

import json
import logging
import re

import requests
from bs4 import BeautifulSoup

from constants import BROWSER_USER_AGENT
from constants.sources import (
    YOUTUBE_API_URL, YOUTUBE_WATCH_URL, YOUTUBE_THUMBNAIL_URL, DEFAULT_YOUTUBE_TITLE,
)
from utils.errors import FetchError, InvalidURLError
from utils.url_validator import SSRFError, safe_fetch

logger = logging.getLogger(__name__)

VIDEO_ID_PATTERNS = (
    re.compile(r'(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/|youtube\.com/shorts/)([^&\n?#/]+)'),
    re.compile(r'youtube\.com/watch\?.*?\bv=([^&\n?#]+)'),
)

PLAYER_RESPONSE_RE = re.compile(r'ytInitialPlayerResponse\s*=\s*(\{.+?\})\s*;\s*(?:var\s|</script>)', re.DOTALL)

FETCH_FAILED = 'Failed to fetch YouTube video information'
FETCH_FAILED_USER = 'The YouTube video could not be loaded. Try another video or check the URL.'


def extract_video_id(url):
    """Return the video id for any supported YouTube URL shape, else None."""
    for pattern in VIDEO_ID_PATTERNS:
        match = pattern.search(url or '')
        if match:
            return match.group(1)
    return None


def _api_thumbnail(thumbnails):
    for size in ('maxres', 'high', 'default'):
        if thumbnails.get(size, {}).get('url'):
            return thumbnails[size]['url']
    return ''


def fetch_from_api(video_id, api_key, timeout=15):
    """Query the YouTube Data API v3 for the video snippet."""
    response = requests.get(
        YOUTUBE_API_URL,
        params={'part': 'snippet', 'id': video_id, 'key': api_key},
        timeout=timeout,
    )
    response.raise_for_status()
    items = response.json().get('items') or []
    if not items:
        raise LookupError('Video not found')
    snippet = items[0]['snippet']
    return {
        'title': snippet.get('title', ''),
        'description': snippet.get('description', ''),
        'thumbnail': _api_thumbnail(snippet.get('thumbnails', {})),
    }


def from_player_response(html, soup, video_id):
    """Strategy 1: the ytInitialPlayerResponse JSON embedded in the watch page."""
    match = PLAYER_RESPONSE_RE.search(html)
    if not match:
        return None
    try:
        details = json.loads(match.group(1)).get('videoDetails') or {}
    except json.JSONDecodeError:
        return None
    if not details.get('shortDescription'):
        return None
    thumbnails = (details.get('thumbnail') or {}).get('thumbnails') or []
    return {
        'title': details.get('title') or DEFAULT_YOUTUBE_TITLE,
        'description': details['shortDescription'],
        'thumbnail': thumbnails[-1]['url'] if thumbnails else YOUTUBE_THUMBNAIL_URL.format(video_id=video_id),
    }


def from_meta_tags(html, soup, video_id):
    """Strategy 2: open-graph meta tags."""
    def meta(prop):
        tag = soup.find('meta', attrs={'property': prop})
        return tag.get('content', '') if tag else ''

    return {
        'title': meta('og:title') or DEFAULT_YOUTUBE_TITLE,
        'description': meta('og:description'),
        'thumbnail': meta('og:image') or YOUTUBE_THUMBNAIL_URL.format(video_id=video_id),
    }


SCRAPE_STRATEGIES = (from_player_response, from_meta_tags)


def parse_watch_page(html, video_id):
    soup = BeautifulSoup(html, 'html.parser')
    for strategy in SCRAPE_STRATEGIES:
        info = strategy(html, soup, video_id)
        if info:
            logger.debug("YouTube %s parsed with %s", video_id, strategy.__name__)
            return info
    return None


def scrape_youtube_info(video_id, timeout=15):
    try:
        response = safe_fetch(
            YOUTUBE_WATCH_URL.format(video_id=video_id),
            headers={'User-Agent': BROWSER_USER_AGENT, 'Accept-Language': 'en-US,en;q=0.9'},
            timeout=timeout,
        )
    except (requests.RequestException, SSRFError) as e:
        logger.warning("Error scraping YouTube info for %s: %s", video_id, e)
        raise FetchError(FETCH_FAILED, user_message=FETCH_FAILED_USER, status_code=400) from e
    return parse_watch_page(response.text, video_id)


def fetch_youtube_info(url, api_key=None, timeout=15):
    """
    Fetch {title, description, thumbnail} for a YouTube URL.

    Raises:
        InvalidURLError: If no video id can be extracted from the URL
        FetchError: If neither the API nor the watch page yields the video
    """
    video_id = extract_video_id(url)
    if not video_id:
        raise InvalidURLError('Invalid YouTube URL')

    if api_key:
        try:
            return fetch_from_api(video_id, api_key, timeout=timeout)
        except (requests.RequestException, LookupError, KeyError, ValueError) as e:
            logger.warning("YouTube API lookup failed for %s, scraping instead: %s", video_id, e)

    return scrape_youtube_info(video_id, timeout=timeout)
