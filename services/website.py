"""
Website Fetcher

Scrapes a recipe page. schema.org Recipe JSON-LD is preferred; pages
without it fall back to visible text from the main content element.
"""

import json
import logging
import re
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

from constants import BROWSER_USER_AGENT
from constants.sources import DEFAULT_WEBSITE_TITLE
from utils.errors import FetchError
from utils.url_validator import safe_fetch

logger = logging.getLogger(__name__)

CONTENT_SELECTORS = 'main, article, .recipe, [itemtype*="Recipe"]'


def _is_recipe_type(item):
    if not isinstance(item, dict):
        return False
    item_type = item.get('@type')
    if isinstance(item_type, list):
        return 'Recipe' in item_type
    return item_type == 'Recipe'


def _find_recipe(data):
    """Find a Recipe object in a JSON-LD payload (object, list or @graph)."""
    if isinstance(data, list):
        for item in data:
            found = _find_recipe(item)
            if found:
                return found
        return None
    if not isinstance(data, dict):
        return None
    if _is_recipe_type(data):
        return data
    graph = data.get('@graph')
    if isinstance(graph, list):
        return _find_recipe(graph)
    return None


def find_recipe_jsonld(soup):
    """Return the first schema.org Recipe object embedded in the page, or None."""
    for script in soup.find_all('script', type='application/ld+json'):
        raw = script.string or script.get_text()
        if not raw:
            continue
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            continue
        recipe = _find_recipe(data)
        if recipe:
            return recipe
    return None


def _as_list(value):
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def jsonld_ingredients(recipe):
    """recipeIngredient entries as the exact strings listed on the page."""
    lines = []
    for item in _as_list(recipe.get('recipeIngredient') or recipe.get('ingredients')):
        if isinstance(item, dict):
            item = item.get('text') or item.get('name') or ''
        text = str(item).strip()
        if text:
            lines.append(text)
    return lines


def jsonld_instructions(recipe):
    """Flatten recipeInstructions (strings, HowToStep, HowToSection) into step texts."""
    steps = []

    def walk(node):
        if node is None:
            return
        if isinstance(node, str):
            for line in node.splitlines():
                line = line.strip()
                if line:
                    steps.append(line)
        elif isinstance(node, list):
            for item in node:
                walk(item)
        elif isinstance(node, dict):
            if 'itemListElement' in node:
                walk(node['itemListElement'])
            elif isinstance(node.get('text'), str):
                walk(node['text'])
            elif isinstance(node.get('name'), str):
                walk(node['name'])

    walk(recipe.get('recipeInstructions'))
    return steps


def normalize_image(image, page_url):
    """
    Reduce a JSON-LD/meta image value to one absolute URL string.

    Lists use their last entry (usually the largest rendition), objects
    their url/contentUrl. Returns '' when nothing usable is found.
    """
    if isinstance(image, list):
        image = image[-1] if image else ''
    if isinstance(image, dict):
        image = image.get('url') or image.get('contentUrl') or ''
    image = str(image or '').strip()
    if image and not image.startswith('http'):
        try:
            image = urljoin(page_url, image)
        except ValueError:
            logger.warning("Could not make image URL absolute: %r", image)
            image = ''
    return image


def build_structured_content(recipe, ingredients, instructions):
    name = recipe.get('name') or ''
    content = f"Recipe: {name}\n\n"
    if recipe.get('description'):
        content += f"Description: {recipe['description']}\n\n"
    if ingredients:
        content += 'Ingredients:\n'
        content += ''.join(f"- {line}\n" for line in ingredients)
        content += '\n'
    if instructions:
        content += 'Instructions:\n'
        content += ''.join(f"{i}. {text}\n" for i, text in enumerate(instructions, 1))
    return content


def from_structured_data(soup, page_url):
    """Strategy 1: schema.org Recipe JSON-LD."""
    recipe = find_recipe_jsonld(soup)
    if not recipe:
        return None
    ingredients = jsonld_ingredients(recipe)
    instructions = jsonld_instructions(recipe)
    return {
        'title': str(recipe.get('name') or '').strip(),
        'content': build_structured_content(recipe, ingredients, instructions),
        'image': normalize_image(recipe.get('image'), page_url),
        'ingredients': ingredients,
        'instructions': instructions,
        'structured': True,
    }


def _meta_content(soup, prop):
    tag = soup.find('meta', attrs={'property': prop})
    return tag.get('content', '').strip() if tag else ''


def from_page_text(soup, page_url):
    """Strategy 2: visible text of the main content element."""
    title = _meta_content(soup, 'og:title')
    if not title and soup.title and soup.title.string:
        title = soup.title.string.strip()

    image = _meta_content(soup, 'og:image')
    if not image:
        img = soup.select_one('[itemtype*="Recipe"] img') or soup.select_one('article img')
        image = img.get('src', '') if img else ''

    for tag in soup(['script', 'style', 'noscript']):
        tag.decompose()
    container = soup.select_one(CONTENT_SELECTORS) or soup.body
    content = container.get_text(' ') if container else ''
    content = re.sub(r'\s+', ' ', content).strip()
    if not content:
        return None

    return {
        'title': title or DEFAULT_WEBSITE_TITLE,
        'content': content,
        'image': normalize_image(image, page_url),
        'ingredients': [],
        'instructions': [],
        'structured': False,
    }


STRATEGIES = (from_structured_data, from_page_text)


def parse_recipe_page(html, page_url, placeholder_image=''):
    """
    Run the extraction strategies over already fetched HTML.

    Returns a dict with title, content, image, ingredients, instructions
    and structured (True when JSON-LD was used).

    Raises:
        FetchError: If no strategy finds any content
    """
    soup = BeautifulSoup(html, 'html.parser')
    for strategy in STRATEGIES:
        result = strategy(soup, page_url)
        if result:
            logger.debug("Website %s parsed with %s", page_url, strategy.__name__)
            if not result['image']:
                logger.info("No image found on %s, using placeholder", page_url)
                result['image'] = placeholder_image
            return result
    raise FetchError('Could not extract recipe content from website',
                     user_message='Failed to scrape recipe from website')


def scrape_website(url, timeout=15, placeholder_image=''):
    """Fetch a recipe page and extract its content. See parse_recipe_page."""
    try:
        response = safe_fetch(url, headers={'User-Agent': BROWSER_USER_AGENT}, timeout=timeout)
    except requests.RequestException as e:
        logger.warning("Error scraping website %s: %s", url, e)
        raise FetchError(f'Failed to scrape recipe from website: {e}',
                         user_message='Failed to scrape recipe from website') from e
    return parse_recipe_page(response.text, url, placeholder_image)
