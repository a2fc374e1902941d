import json

import pytest
import requests

from conftest import FakeResponse
from services import website
from services.website import parse_recipe_page, scrape_website, normalize_image, jsonld_instructions
from utils.errors import FetchError

PAGE_URL = 'https://cooking.example.com/recipes/lemon-cake'


def page_with_jsonld(data, body=''):
    return (
        '<html><head><title>Lemon Cake | Example</title>'
        f'<script type="application/ld+json">{json.dumps(data)}</script>'
        f'</head><body>{body}</body></html>'
    )


LEMON_CAKE = {
    '@context': 'https://schema.org',
    '@type': 'Recipe',
    'name': 'Lemon Cake',
    'description': 'A bright, fluffy cake.',
    'image': ['https://cdn.example.com/small.jpg', 'https://cdn.example.com/large.jpg'],
    'recipeIngredient': [
        '200 g flour',
        '150 g sugar',
        '3 eggs',
        '1 lemon, zested',
        '100 ml milk',
    ],
    'recipeInstructions': [
        {'@type': 'HowToStep', 'text': 'Preheat the oven to 180C.'},
        {'@type': 'HowToStep', 'text': 'Mix everything together.'},
        {'@type': 'HowToStep', 'text': 'Bake for 35 minutes.'},
    ],
}


def test_structured_data_matches_page_exactly():
    result = parse_recipe_page(page_with_jsonld(LEMON_CAKE), PAGE_URL)
    assert result['structured'] is True
    assert result['title'] == 'Lemon Cake'
    assert result['ingredients'] == LEMON_CAKE['recipeIngredient']
    assert result['instructions'] == [
        'Preheat the oven to 180C.', 'Mix everything together.', 'Bake for 35 minutes.',
    ]
    assert result['image'] == 'https://cdn.example.com/large.jpg'


def test_structured_content_text_layout():
    content = parse_recipe_page(page_with_jsonld(LEMON_CAKE), PAGE_URL)['content']
    assert content.startswith('Recipe: Lemon Cake\n\n')
    assert 'Description: A bright, fluffy cake.' in content
    assert '- 1 lemon, zested\n' in content
    assert '3. Bake for 35 minutes.' in content


def test_recipe_found_inside_graph_with_type_list():
    data = {
        '@context': 'https://schema.org',
        '@graph': [
            {'@type': 'WebPage', 'name': 'Page'},
            dict(LEMON_CAKE, **{'@type': ['Recipe', 'NewsArticle']}),
        ],
    }
    result = parse_recipe_page(page_with_jsonld(data), PAGE_URL)
    assert result['title'] == 'Lemon Cake'
    assert len(result['ingredients']) == 5


def test_single_string_ingredient_and_sections():
    recipe = {
        '@type': 'Recipe',
        'name': 'Soup',
        'recipeIngredient': '1 onion',
        'recipeInstructions': [
            {'@type': 'HowToSection', 'name': 'Base', 'itemListElement': [
                {'@type': 'HowToStep', 'text': 'Chop the onion.'},
                {'@type': 'HowToStep', 'text': 'Fry it.'},
            ]},
            'Add stock.\nSimmer.',
        ],
    }
    result = parse_recipe_page(page_with_jsonld(recipe), PAGE_URL)
    assert result['ingredients'] == ['1 onion']
    assert result['instructions'] == ['Chop the onion.', 'Fry it.', 'Add stock.', 'Simmer.']


def test_jsonld_instructions_missing():
    assert jsonld_instructions({'name': 'x'}) == []


@pytest.mark.parametrize('image, expected', [
    ('https://a.example/img.jpg', 'https://a.example/img.jpg'),
    ({'@type': 'ImageObject', 'url': 'https://a.example/obj.jpg'}, 'https://a.example/obj.jpg'),
    ({'contentUrl': 'https://a.example/c.jpg'}, 'https://a.example/c.jpg'),
    ('/images/cake.jpg', 'https://cooking.example.com/images/cake.jpg'),
    ([], ''),
    (None, ''),
])
def test_normalize_image(image, expected):
    assert normalize_image(image, PAGE_URL) == expected


def test_missing_image_uses_placeholder():
    data = dict(LEMON_CAKE)
    del data['image']
    result = parse_recipe_page(page_with_jsonld(data), PAGE_URL, placeholder_image='/placeholder-recipe.svg')
    assert result['image'] == '/placeholder-recipe.svg'


def test_page_text_fallback():
    html = (
        '<html><head><title>Grandma Stew</title>'
        '<meta property="og:image" content="/stew.jpg">'
        '<script>var tracking = 1;</script></head>'
        '<body><nav>Home</nav><article><h1>Stew</h1>\n<p>2 carrots</p>   <p>Cook slowly.</p></article></body></html>'
    )
    result = parse_recipe_page(html, PAGE_URL)
    assert result['structured'] is False
    assert result['title'] == 'Grandma Stew'
    assert result['content'] == 'Stew 2 carrots Cook slowly.'
    assert result['image'] == 'https://cooking.example.com/stew.jpg'
    assert result['ingredients'] == []


def test_empty_page_raises_fetch_error():
    with pytest.raises(FetchError):
        parse_recipe_page('<html><body></body></html>', PAGE_URL)


def test_scrape_website_fetches_through_safe_fetch(monkeypatch):
    seen = {}

    def fake_fetch(url, headers=None, timeout=15, **kwargs):
        seen['url'] = url
        seen['headers'] = headers
        return FakeResponse(page_with_jsonld(LEMON_CAKE))

    monkeypatch.setattr(website, 'safe_fetch', fake_fetch)
    result = scrape_website(PAGE_URL)
    assert seen['url'] == PAGE_URL
    assert 'Mozilla' in seen['headers']['User-Agent']
    assert result['title'] == 'Lemon Cake'


def test_scrape_website_network_error(monkeypatch):
    def fake_fetch(url, **kwargs):
        raise requests.ConnectionError('connection refused')

    monkeypatch.setattr(website, 'safe_fetch', fake_fetch)
    with pytest.raises(FetchError) as exc:
        scrape_website(PAGE_URL)
    assert exc.value.to_dict() == {'error': 'Failed to scrape recipe from website'}
    assert exc.value.status_code == 500
