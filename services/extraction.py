"""
LLM Recipe Extraction

Sends fetched content to the OpenAI chat completions API with a strict JSON
schema and parses the reply defensively into a recipe dict.
"""

import json
import logging
import math
import re
from dataclasses import dataclass
from typing import Optional

from openai import OpenAI, OpenAIError

from constants import SOURCE_WEBSITE, VALID_DIFFICULTIES
from utils.errors import ExtractionError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = 'You are a recipe extraction expert. Always return valid JSON only, no markdown formatting.'

RECIPE_SCHEMA = {
    'type': 'object',
    'additionalProperties': False,
    'required': [
        'title', 'description', 'servings', 'prep_time', 'cook_time',
        'total_time', 'difficulty', 'ingredients', 'instructions', 'tags',
    ],
    'properties': {
        'title': {'type': 'string'},
        'description': {'type': 'string'},
        'servings': {'type': 'integer'},
        'prep_time': {'type': ['integer', 'null']},
        'cook_time': {'type': ['integer', 'null']},
        'total_time': {'type': ['integer', 'null']},
        'difficulty': {'type': 'string', 'enum': sorted(VALID_DIFFICULTIES)},
        'ingredients': {
            'type': 'array',
            'items': {
                'type': 'object',
                'additionalProperties': False,
                'required': ['name', 'amount', 'unit', 'notes'],
                'properties': {
                    'name': {'type': 'string'},
                    'amount': {'type': ['number', 'null']},
                    'unit': {'type': 'string'},
                    'notes': {'type': ['string', 'null']},
                },
            },
        },
        'instructions': {
            'type': 'array',
            'items': {
                'type': 'object',
                'additionalProperties': False,
                'required': ['step_number', 'description', 'duration'],
                'properties': {
                    'step_number': {'type': 'integer'},
                    'description': {'type': 'string'},
                    'duration': {'type': ['integer', 'null']},
                },
            },
        },
        'tags': {'type': 'array', 'items': {'type': 'string'}},
    },
}

BASE_RULES = """Rules:
- Extract all ingredients with proper amounts and units
- Number instructions sequentially starting from 1
- Estimate difficulty based on number of steps and complexity
- Include relevant dietary tags (vegetarian, vegan, gluten-free, etc.)
- Estimate times in minutes if not explicitly stated
- Write the description as 2-3 sentences summarizing the recipe"""

VIDEO_RULES = """
- This text comes from a video title and caption. Only use ingredients and
  quantities that are actually written in it. Do NOT invent ingredients,
  amounts or steps; use null for amounts that are not given."""

STATUS_OK = 'ok'
STATUS_PARSE_ERROR = 'parse_error'
STATUS_SCHEMA_VIOLATION = 'schema_violation'

CODE_FENCE_RE = re.compile(r'^```(?:json)?\s*|\s*```$', re.IGNORECASE)


@dataclass
class ExtractionResult:
    """Outcome of parsing one LLM reply."""
    status: str
    recipe: Optional[dict] = None
    error: Optional[str] = None

    @property
    def ok(self):
        return self.status == STATUS_OK


def build_prompt(content, source_type):
    rules = BASE_RULES
    if source_type != SOURCE_WEBSITE:
        rules += VIDEO_RULES
    return f"Extract recipe information from the following content.\n\n{rules}\n\nContent:\n{content}"


def _to_number(value):
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _to_minutes(value):
    number = _to_number(value)
    if number is None or number < 0:
        return None
    return int(round(number))


def _coerce_ingredient(item):
    if isinstance(item, str):
        item = {'name': item}
    if not isinstance(item, dict) or not str(item.get('name') or '').strip():
        return None
    ingredient = {
        'name': str(item['name']).strip(),
        'amount': _to_number(item.get('amount')),
        'unit': str(item.get('unit') or '').strip(),
    }
    if item.get('notes'):
        ingredient['notes'] = str(item['notes']).strip()
    return ingredient


def _coerce_instruction(item):
    if isinstance(item, str):
        item = {'description': item}
    if not isinstance(item, dict) or not str(item.get('description') or '').strip():
        return None
    instruction = {'description': str(item['description']).strip()}
    duration = _to_minutes(item.get('duration'))
    if duration is not None:
        instruction['duration'] = duration
    return instruction


def number_instructions(instructions):
    """Renumber instruction dicts 1..n in list order."""
    return [dict(step, step_number=i) for i, step in enumerate(instructions, 1)]


def parse_extraction(text):
    """
    Parse a model reply into an ExtractionResult.

    parse_error: empty reply or not JSON.
    schema_violation: JSON but not a recipe object with a title and
    non-empty ingredients and instructions.
    """
    if not text or not text.strip():
        return ExtractionResult(STATUS_PARSE_ERROR, error='Empty response from model')

    try:
        data = json.loads(CODE_FENCE_RE.sub('', text.strip()))
    except json.JSONDecodeError as e:
        return ExtractionResult(STATUS_PARSE_ERROR, error=f'Invalid JSON: {e}')

    if not isinstance(data, dict):
        return ExtractionResult(STATUS_SCHEMA_VIOLATION, error='Response is not an object')

    title = data.get('title')
    if not isinstance(title, str) or not title.strip():
        return ExtractionResult(STATUS_SCHEMA_VIOLATION, error='Missing title')
    if not isinstance(data.get('ingredients'), list) or not isinstance(data.get('instructions'), list):
        return ExtractionResult(STATUS_SCHEMA_VIOLATION, error='Missing ingredients or instructions')

    ingredients = [i for i in map(_coerce_ingredient, data['ingredients']) if i]
    instructions = [s for s in map(_coerce_instruction, data['instructions']) if s]
    if not ingredients or not instructions:
        return ExtractionResult(STATUS_SCHEMA_VIOLATION, error='Empty ingredients or instructions')

    difficulty = data.get('difficulty')
    servings = _to_minutes(data.get('servings'))
    tags = data.get('tags') if isinstance(data.get('tags'), list) else []

    recipe = {
        'title': title.strip(),
        'description': str(data.get('description') or '').strip(),
        'servings': servings if servings and servings > 0 else 4,
        'prep_time': _to_minutes(data.get('prep_time')),
        'cook_time': _to_minutes(data.get('cook_time')),
        'total_time': _to_minutes(data.get('total_time')),
        'difficulty': difficulty if isinstance(difficulty, str) and difficulty in VALID_DIFFICULTIES else None,
        'ingredients': ingredients,
        'instructions': number_instructions(instructions),
        'tags': [str(t).strip().lower() for t in tags if str(t).strip()],
    }
    return ExtractionResult(STATUS_OK, recipe=recipe)


class RecipeExtractor:
    """Schema-constrained recipe extraction through the OpenAI API."""

    def __init__(self, api_key=None, model='gpt-4o', temperature=0.3, max_tokens=2000, timeout=60):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._client = None

    @property
    def client(self):
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key, timeout=self.timeout)
        return self._client

    def complete(self, content, source_type):
        """Return the raw model reply text."""
        completion = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {'role': 'system', 'content': SYSTEM_PROMPT},
                {'role': 'user', 'content': build_prompt(content, source_type)},
            ],
            response_format={
                'type': 'json_schema',
                'json_schema': {'name': 'recipe', 'strict': True, 'schema': RECIPE_SCHEMA},
            },
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return completion.choices[0].message.content

    def extract(self, content, source_type):
        """
        Extract a recipe dict from content.

        Raises:
            ExtractionError: If the API call fails or the reply is unusable
        """
        logger.debug("Extracting recipe from %d chars of %s content", len(content), source_type)
        try:
            text = self.complete(content, source_type)
        except OpenAIError as e:
            logger.error("OpenAI request failed: %s", e)
            raise ExtractionError() from e

        result = parse_extraction(text)
        if not result.ok:
            logger.error("Unusable model reply (%s): %s", result.status, result.error)
            raise ExtractionError()
        return result.recipe
