"""
Recipe Pipeline

classify -> fetch -> validate -> extract -> normalize for one submitted URL.
The result is returned to the client for review; nothing is stored here.
"""

import logging

from constants import SOURCE_YOUTUBE, SOURCE_TIKTOK
from utils.errors import ValidationError
from utils.sanitizer import sanitize_url

from .sources import detect_source_type
from .tiktok import fetch_tiktok_info
from .validation import validate_video_content
from .website import scrape_website
from .youtube import fetch_youtube_info

logger = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER_IMAGE = '/placeholder-recipe.svg'


def normalize_recipe(extracted, source_url, source_type, raw_title='', image_url='',
                     placeholder=DEFAULT_PLACEHOLDER_IMAGE):
    """
    Merge LLM output with the fetched metadata into a ParsedRecipe dict.

    The LLM title wins; the fetched title is the fallback. A missing image
    becomes the placeholder.
    """
    recipe = dict(extracted)
    recipe['title'] = (extracted.get('title') or '').strip() or raw_title
    recipe['source_url'] = source_url
    recipe['source_type'] = source_type
    recipe['image_url'] = sanitize_url(image_url) or placeholder
    return recipe


def _video_content(label, info):
    return f"Title: {info['title']}\n\n{label}:\n{info['description']}"


def fetch_content(url, source_type, youtube_api_key=None, placeholder_image=DEFAULT_PLACEHOLDER_IMAGE,
                  timeout=15):
    """
    Fetch and validate the content for one source.

    Returns (content, raw_title, image_url).
    """
    if source_type == SOURCE_YOUTUBE:
        info = fetch_youtube_info(url, api_key=youtube_api_key, timeout=timeout)
        validate_video_content(source_type, info['description'])
        return _video_content('Description', info), info['title'], info['thumbnail']

    if source_type == SOURCE_TIKTOK:
        info = fetch_tiktok_info(url, timeout=timeout)
        validate_video_content(source_type, info['description'])
        return _video_content('Caption', info), info['title'], info['thumbnail']

    page = scrape_website(url, timeout=timeout, placeholder_image=placeholder_image)
    return page['content'], page['title'], page['image']


def parse_recipe_from_url(url, extractor, youtube_api_key=None,
                          placeholder_image=DEFAULT_PLACEHOLDER_IMAGE, timeout=15):
    """
    Run the full pipeline for a URL.

    Args:
        url: Recipe website, YouTube or TikTok URL
        extractor: Object with extract(content, source_type) -> dict
        youtube_api_key: Optional YouTube Data API key
        placeholder_image: Image used when the source has none

    Returns:
        ParsedRecipe dict

    Raises:
        ValidationError, InvalidURLError, FetchError, InsufficientContentError,
        ExtractionError
    """
    url = (url or '').strip()
    if not url:
        raise ValidationError('URL is required')

    source_type = detect_source_type(url)
    logger.debug("Parsing %s as %s", url, source_type)

    content, raw_title, image_url = fetch_content(
        url, source_type, youtube_api_key=youtube_api_key,
        placeholder_image=placeholder_image, timeout=timeout,
    )
    logger.debug("Fetched %d chars of %s content", len(content), source_type)

    extracted = extractor.extract(content, source_type)
    return normalize_recipe(extracted, url, source_type, raw_title, image_url, placeholder_image)
