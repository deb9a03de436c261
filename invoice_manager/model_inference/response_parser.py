"""
Model Response Parser Module.

Generative models are asked for "only JSON" but routinely wrap it in prose
or Markdown fences. This module locates the first balanced ``{...}`` block
in a response and parses it.

Author: ML Engineering Team
"""

import json
from typing import Any, Dict, Optional

from invoice_manager.utils.exceptions import ExtractionFormatError
from invoice_manager.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


def find_json_block(text: str) -> Optional[str]:
    """
    Locate the first balanced ``{...}`` substring.

    Braces inside JSON string literals are ignored. When the first object
    never closes, everything up to the last ``}`` is returned so the parse
    error is reported against the model's actual output.

    Args:
        text: Raw model response.

    Returns:
        The candidate JSON substring, or None if the text holds no ``{``
        followed by a ``}``.

    Example:
        >>> find_json_block('Aquí está: {"monto": 10} ¡listo!')
        '{"monto": 10}'
    """
    start = text.find('{')
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False

    for index in range(start, len(text)):
        char = text[index]

        if in_string:
            if escaped:
                escaped = False
            elif char == '\\':
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
            if depth == 0:
                return text[start:index + 1]

    end = text.rfind('}')
    if end <= start:
        return None
    return text[start:end + 1]


def extract_json_object(response_text: Optional[str]) -> Dict[str, Any]:
    """
    Parse the JSON object embedded in a model response.

    Args:
        response_text: Raw text returned by the model.

    Returns:
        The parsed object.

    Raises:
        ExtractionFormatError: If no JSON block is found, the block does not
            parse, or it parses to something other than an object.
    """
    if not response_text or not response_text.strip():
        raise ExtractionFormatError("empty response", response_text)

    block = find_json_block(response_text)
    if block is None:
        raise ExtractionFormatError("no JSON object found", response_text)

    try:
        data = json.loads(block)
    except json.JSONDecodeError as e:
        logger.debug(f"Raw model response: {response_text!r}")
        raise ExtractionFormatError(f"invalid JSON: {e}", response_text) from e
    except RecursionError as e:
        raise ExtractionFormatError("JSON nested too deeply", response_text) from e

    if not isinstance(data, dict):
        raise ExtractionFormatError(
            f"expected a JSON object, got {type(data).__name__}",
            response_text
        )

    return data
