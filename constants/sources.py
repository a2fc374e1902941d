"""
Source Constants

Source types, fetch headers and content heuristics for the extraction pipeline.
"""

SOURCE_WEBSITE = 'website'
SOURCE_YOUTUBE = 'youtube'
SOURCE_TIKTOK = 'tiktok'

YOUTUBE_HOSTS = ('youtube.com', 'youtu.be')
TIKTOK_HOSTS = ('tiktok.com',)

# Browser-like user agent; several recipe sites refuse obvious bots
BROWSER_USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)

YOUTUBE_API_URL = 'https://www.googleapis.com/youtube/v3/videos'
YOUTUBE_WATCH_URL = 'https://www.youtube.com/watch?v={video_id}'
YOUTUBE_THUMBNAIL_URL = 'https://img.youtube.com/vi/{video_id}/maxresdefault.jpg'

DEFAULT_YOUTUBE_TITLE = 'YouTube Recipe'
DEFAULT_TIKTOK_TITLE = 'TikTok Recipe'
DEFAULT_WEBSITE_TITLE = 'Recipe'

# Minimum description length per video source
MIN_DESCRIPTION_LENGTH = {
    SOURCE_YOUTUBE: 100,
    SOURCE_TIKTOK: 80,
}

# Phrases meaning the actual recipe lives somewhere else
ELSEWHERE_PHRASES = {
    SOURCE_YOUTUBE: (
        'recipe in bio',
        'link in bio',
        'full recipe in comments',
        'recipe link below',
    ),
    SOURCE_TIKTOK: (
        'recipe in bio',
        'link in bio',
        'full recipe',
        'recipe below',
    ),
}

# A TikTok strategy only counts when its description is longer than this
MIN_TIKTOK_STRATEGY_DESCRIPTION = 20

INSUFFICIENT_CONTENT_PREFIX = 'INSUFFICIENT_CONTENT: '
