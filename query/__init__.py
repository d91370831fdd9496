from query.builder import SearchParams, build_template
from query.validators import is_valid_date, is_valid_language_code

__all__ = [
    "SearchParams",
    "build_template",
    "is_valid_date",
    "is_valid_language_code",
]
