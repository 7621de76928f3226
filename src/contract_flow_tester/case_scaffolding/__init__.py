"""Case scaffolding exports."""

from .case_file_builder import build_case_documents, slugify_case_name, write_case_scaffold
from .constants import REQUEST_TEMPLATE_SUFFIX, RESPONSE_TEMPLATE_SUFFIX

__all__ = [
    "REQUEST_TEMPLATE_SUFFIX",
    "RESPONSE_TEMPLATE_SUFFIX",
    "build_case_documents",
    "slugify_case_name",
    "write_case_scaffold",
]
