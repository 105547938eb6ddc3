from .page_id import extract_page_id
from .redact import redact
from .slug import slugify

__all__ = [
    "extract_page_id",
    "redact",
    "slugify",
]
