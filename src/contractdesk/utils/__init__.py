"""Utils package for utility functions"""

from contractdesk.utils.company_names import (
    fix_casing,
    normalize_company_name,
    strip_legal_suffix,
)
from contractdesk.utils.fallback import (
    AsyncStrategy,
    Failure,
    Strategy,
    Success,
    first_success,
    first_success_async,
)

__all__ = [
    "fix_casing",
    "normalize_company_name",
    "strip_legal_suffix",
    "AsyncStrategy",
    "Failure",
    "Strategy",
    "Success",
    "first_success",
    "first_success_async",
]
