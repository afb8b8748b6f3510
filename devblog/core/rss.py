"""RSS 2.0 document generation."""

import re
from datetime import datetime
from email.utils import format_datetime
from typing import Iterable, Optional
from xml.sax.saxutils import escape, quoteattr

from devblog.core.timeutils import as_aware_utc, utcnow
from devblog.schemas.post import PostResponse

ATOM_NAMESPACE = "http://www.w3.org/2005/Atom"

# code points XML 1.0 does not allow anywhere in a document
_ILLEGAL_XML_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def rfc1123(value: datetime) -> str:
    """Format a datetime as an RFC 1123 date, e.g. ``Thu, 15 Jun 2023 00:00:00 GMT``"""
    return format_datetime(as_aware_utc(value), usegmt=True)


def xml_text(text: str) -> str:
    """Escape text for an element body, dropping characters XML cannot carry"""
    return escape(_ILLEGAL_XML_CHARS.sub("", text))


def cdata(text: str) -> str:
    """Wrap text in CDATA, splitting any ``]]>`` so the section stays well formed"""
    text = _ILLEGAL_XML_CHARS.sub("", text)
    return "<![CDATA[" + text.replace("]]>", "]]]]><![CDATA[>") + "]]>"


def post_url(base_url: str, slug: str) -> str:
    return f"{base_url}/posts/{slug}"


def build_rss_feed(
    posts: Iterable[PostResponse],
    base_url: str,
    *,
    title: str,
    description: str,
    language: str = "en-us",
    build_date: Optional[datetime] = None,
) -> str:
    """Render posts as an RSS 2.0 document, one ``<item>`` per post in the given order

    Args:
        posts: posts to include, already ordered
        base_url: absolute site URL without a trailing slash
        title: channel title
        description: channel description
        language: channel language code
        build_date: ``lastBuildDate``, defaults to now
    """
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<rss version="2.0" xmlns:atom="{ATOM_NAMESPACE}">',
        "  <channel>",
        f"    <title>{xml_text(title)}</title>",
        f"    <link>{xml_text(base_url)}</link>",
        f"    <description>{xml_text(description)}</description>",
        f"    <language>{xml_text(language)}</language>",
        f"    <lastBuildDate>{rfc1123(build_date or utcnow())}</lastBuildDate>",
        f'    <atom:link href={quoteattr(_ILLEGAL_XML_CHARS.sub("", base_url) + "/rss.xml")} rel="self" type="application/rss+xml" />',
    ]

    for post in posts:
        link = xml_text(post_url(base_url, post.slug))
        lines.extend([
            "    <item>",
            f"      <title>{xml_text(post.title)}</title>",
            f"      <link>{link}</link>",
            f"      <guid>{link}</guid>",
            f"      <pubDate>{rfc1123(post.published_at)}</pubDate>",
            f"      <description>{cdata(post.excerpt)}</description>",
            "    </item>",
        ])

    lines.extend(["  </channel>", "</rss>"])
    return "\n".join(lines) + "\n"
