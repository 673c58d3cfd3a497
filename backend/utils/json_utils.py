"""
JSON parsing utilities for completion-service responses.

Provides safe JSON parsing functions that handle:
- JSON wrapped in markdown code fences
- Responses with surrounding explanation text
- Truncated JSON (output token limit reached mid-object)
- Partial recovery of a named array of objects
"""

import json
import re
import logging
from typing import Any, List, Optional

logger = logging.getLogger(__name__)

# Leading ```json / ``` fence and trailing ``` fence
_OPEN_FENCE = re.compile(r"^```[a-zA-Z]*\s*")
_CLOSE_FENCE = re.compile(r"\s*```\s*$")


def safe_json_parse(text: str, default: Any = None) -> Optional[Any]:
    """
    Safely parse JSON with error handling.

    Args:
        text: String to parse as JSON
        default: Value to return if parsing fails

    Returns:
        Parsed JSON or default value

    Example:
        >>> safe_json_parse('{"key": "value"}')
        {'key': 'value'}
        >>> safe_json_parse('invalid', default={})
        {}
    """
    if not text or not isinstance(text, str):
        return default

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug(f"JSON parse error: {e}, input preview: {text[:100]}")
        return default


def strip_code_fences(text: str) -> str:
    """
    Remove a surrounding markdown code fence from a model response.

    Example:
        >>> strip_code_fences('```json\\n{"a":1}\\n```')
        '{"a":1}'
    """
    if not text:
        return ""
    text = text.strip()
    if text.startswith("```"):
        text = _OPEN_FENCE.sub("", text, count=1)
        text = _CLOSE_FENCE.sub("", text)
    return text.strip()


def extract_json_from_text(text: str) -> Optional[dict]:
    """
    Extract a JSON object from text that may contain markdown fences or surrounding text.

    Handles common LLM output patterns:
    - ```json ... ```
    - ``` ... ```
    - Plain JSON objects
    - JSON with surrounding explanation text

    Args:
        text: Text potentially containing a JSON object

    Returns:
        Extracted and parsed JSON dict, or None if not found

    Example:
        >>> extract_json_from_text('Here is the result: ```json\\n{"key": "value"}\\n```')
        {'key': 'value'}
    """
    if not text or not isinstance(text, str):
        return None

    text = text.strip()

    # Try direct parse first (fastest path)
    result = safe_json_parse(strip_code_fences(text))
    if isinstance(result, dict):
        return result

    patterns = [
        # JSON code block
        r'```json\s*([\s\S]*?)\s*```',
        # Generic code block
        r'```\s*([\s\S]*?)\s*```',
        # Find JSON object pattern (greedy, from first { to last })
        r'(\{[\s\S]*\})',
    ]

    for pattern in patterns:
        match = re.search(pattern, text)
        if match:
            candidate = match.group(1).strip()
            result = safe_json_parse(candidate)
            if isinstance(result, dict):
                return result

    return None


def fix_truncated_json(text: str) -> Optional[str]:
    """
    Attempt to fix truncated JSON by closing open strings and brackets.

    Tracks nesting outside of string literals so brackets inside captions
    and descriptions are not counted. Best-effort only.

    Args:
        text: Potentially truncated JSON string

    Returns:
        Fixed JSON string, or None if unfixable

    Example:
        >>> fix_truncated_json('{"items": [1, 2')
        '{"items": [1, 2]}'
    """
    if not text or not isinstance(text, str):
        return None

    text = text.strip()
    start = text.find("{")
    if start == -1:
        return None
    text = text[start:]

    stack: List[str] = []
    in_string = False
    escaped = False
    for char in text:
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in "{[":
            stack.append("}" if char == "{" else "]")
        elif char in "}]":
            if not stack or stack[-1] != char:
                return None
            stack.pop()

    if not stack and not in_string:
        return text

    fixed = text
    if in_string:
        if escaped:
            fixed = fixed[:-1]
        fixed += '"'
    # A dangling comma or key separator can't be closed into valid JSON
    fixed = re.sub(r"[,:]\s*$", "", fixed.rstrip())
    fixed += "".join(reversed(stack))

    if safe_json_parse(fixed) is not None:
        return fixed

    return None


def recover_array_items(text: str, key: str) -> Optional[List[dict]]:
    """
    Recover the complete objects of a named array from malformed JSON.

    Locates ``"<key>": [`` with a regex, then decodes item objects one at a
    time until the array closes or an item fails to decode (e.g. the
    response was cut off mid-item).

    Args:
        text: Raw response text
        key: Name of the array property, e.g. "contentItems"

    Returns:
        The recovered objects (possibly empty) if the array was found,
        or None if the array marker is absent
    """
    if not text:
        return None

    match = re.search(r'"%s"\s*:\s*\[' % re.escape(key), text)
    if not match:
        return None

    decoder = json.JSONDecoder()
    items: List[dict] = []
    pos = match.end()
    length = len(text)

    while pos < length:
        while pos < length and text[pos] in " \t\r\n,":
            pos += 1
        if pos >= length or text[pos] == "]":
            break
        try:
            value, pos = decoder.raw_decode(text, pos)
        except json.JSONDecodeError:
            logger.debug(f"Stopped array recovery for '{key}' at offset {pos}")
            break
        if isinstance(value, dict):
            items.append(value)

    return items
