"""
Parsing Service

Amount parsing, servings scaling and display formatting for recipe data.
"""

import math
import re

from constants import UNICODE_FRACTIONS, COMMON_FRACTIONS

MIXED_FRACTION_RE = re.compile(r'^(\d+)\s+(\d+)\s*/\s*(\d+)$')
SIMPLE_FRACTION_RE = re.compile(r'^(\d+)\s*/\s*(\d+)$')


def float_to_fraction(value):
    """Convert float to fraction string for display."""
    if value is None or value == 0:
        return '0'
    if value == int(value):
        return str(int(value))
    whole = int(value)
    decimal = value - whole
    # Common fractions, with tolerance
    for dec, frac in COMMON_FRACTIONS.items():
        if abs(decimal - dec) < 0.02:
            if whole > 0:
                return f"{whole} {frac}"
            return frac
    return f"{value:.2f}".rstrip('0').rstrip('.')


def normalize_fractions(text):
    """Replace Unicode fraction characters with decimals ("1½" -> "1.5")."""
    text = re.sub(r'[\s\u00a0\u2000-\u200b]+', ' ', text)
    for char, value in UNICODE_FRACTIONS.items():
        if char not in text:
            continue
        pattern = r'(\d+)\s*' + re.escape(char)
        match = re.search(pattern, text)
        if match:
            text = re.sub(pattern, str(float(match.group(1)) + value), text)
        else:
            text = text.replace(char, str(value))
    return text


def parse_amount(value):
    """
    Parse an ingredient amount into a float.

    Accepts numbers, "2", "0.5", "1/2", "1 1/2", "½" and "1½".
    Returns None for anything else (including "to taste").
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            value = float(value)
        except OverflowError:
            return None
        return value if math.isfinite(value) else None

    text = normalize_fractions(str(value)).strip().replace(',', '.')
    if not text:
        return None

    mixed = MIXED_FRACTION_RE.match(text)
    if mixed:
        whole, num, denom = (float(g) for g in mixed.groups())
        return whole + num / denom if denom else None

    simple = SIMPLE_FRACTION_RE.match(text)
    if simple:
        num, denom = (float(g) for g in simple.groups())
        return num / denom if denom else None

    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def scale_ingredients(ingredients, from_servings, to_servings):
    """
    Scale ingredient amounts from one servings count to another.

    Amounts are rounded to 2 decimals. Amounts that cannot be parsed are
    left unchanged. Returns new dicts; the input list is not modified.
    """
    if not from_servings or not to_servings or from_servings == to_servings:
        return [dict(i) for i in ingredients]

    factor = to_servings / from_servings
    scaled = []
    for ingredient in ingredients:
        item = dict(ingredient)
        amount = parse_amount(item.get('amount'))
        if amount is not None:
            item['amount'] = round(amount * factor, 2)
        scaled.append(item)
    return scaled


def format_time(minutes):
    """Format minutes for display: 45min, 1h, 1h 30min."""
    if not minutes:
        return ''
    minutes = int(minutes)
    if minutes < 60:
        return f"{minutes}min"
    hours, rest = divmod(minutes, 60)
    if rest == 0:
        return f"{hours}h"
    return f"{hours}h {rest}min"
