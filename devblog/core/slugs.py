import re

_WHITESPACE = re.compile(r"\s+")
_NON_SLUG = re.compile(r"[^\w-]+", re.ASCII)


def slugify(text: str) -> str:
    """Derive a URL-safe slug from a name or title

    ``"Tailwind CSS"`` becomes ``"tailwind-css"`` and ``"Next.js"`` becomes ``"nextjs"``.
    """
    slug = _WHITESPACE.sub("-", text.strip().lower())
    return _NON_SLUG.sub("", slug)
