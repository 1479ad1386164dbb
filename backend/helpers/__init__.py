"""
Helpers package - shared utility functions for route handlers.
"""

from .request_helpers import BadRequest, require_fields, parse_page, parse_bool

__all__ = [
    'BadRequest',
    'require_fields',
    'parse_page',
    'parse_bool'
]
