import re

MAX_SLUG_LENGTH = 60
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Lowercase, collapse non-alphanumerics to ``-``, trim, cap at 60 chars."""
    slug = _NON_ALNUM.sub("-", (text or "").lower().strip()).strip("-")
    return slug[:MAX_SLUG_LENGTH]
