import pytest

from services.sources import detect_source_type


@pytest.mark.parametrize('url, expected', [
    ('https://www.youtube.com/watch?v=dQw4w9WgXcQ', 'youtube'),
    ('https://youtu.be/dQw4w9WgXcQ', 'youtube'),
    ('https://m.youtube.com/shorts/abc123', 'youtube'),
    ('youtu.be/abc123', 'youtube'),
    ('https://www.tiktok.com/@chef/video/7234567890', 'tiktok'),
    ('https://vm.tiktok.com/ZMabc/', 'tiktok'),
    ('https://www.allrecipes.com/recipe/1234/pancakes/', 'website'),
    ('https://notyoutube.com/watch?v=abc', 'website'),
])
def test_detect_source_type(url, expected):
    assert detect_source_type(url) == expected


@pytest.mark.parametrize('url', ['', None, 'not a url', 'http://[::1'])
def test_unparseable_input_is_a_website(url):
    assert detect_source_type(url) == 'website'


@pytest.mark.parametrize('url', [
    'https://example.com/tiktok.com/video',
    'https://tiktok.com.example.net/v/1',
    'https://nottiktok.com/@chef',
])
def test_tiktok_lookalikes_are_websites(url):
    assert detect_source_type(url) == 'website'
