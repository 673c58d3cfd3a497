"""
Utility modules for the Content Engine backend.
"""

from .json_utils import (
    safe_json_parse,
    strip_code_fences,
    extract_json_from_text,
    fix_truncated_json,
    recover_array_items,
)

__all__ = [
    'safe_json_parse',
    'strip_code_fences',
    'extract_json_from_text',
    'fix_truncated_json',
    'recover_array_items',
]
