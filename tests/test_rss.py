import xml.etree.ElementTree as ET
import pytest
from datetime import datetime, timezone
from fastapi.testclient import TestClient
from devblog.core.config import Settings
from devblog.core.rss import build_rss_feed, cdata, rfc1123, xml_text
from devblog.main import create_app
from devblog.schemas.post import PostResponse


def make_post_row(post_id: int, slug: str, published_at: datetime, **overrides) -> PostResponse:
    data = {
        "id": post_id,
        "slug": slug,
        "title": f"Title {post_id}",
        "excerpt": f"Excerpt {post_id}",
        "content": f"Content {post_id}",
        "reading_time": "1 min read",
        "published_at": published_at,
    }
    data.update(overrides)
    return PostResponse(**data)


def build(posts, base_url="https://blog.example.com"):
    return build_rss_feed(
        posts,
        base_url,
        title="DevBlog",
        description="Posts",
        build_date=datetime(2024, 1, 1)
    )


class TestRssDocument:
    def test_empty_feed_is_well_formed(self):
        root = ET.fromstring(build([]))
        assert root.tag == "rss"
        assert root.attrib["version"] == "2.0"
        channel = root.find("channel")
        assert channel.findtext("title") == "DevBlog"
        assert channel.findtext("link") == "https://blog.example.com"
        assert channel.findtext("lastBuildDate") == "Mon, 01 Jan 2024 00:00:00 GMT"
        assert channel.findall("item") == []

    def test_one_item_per_post_in_order(self):
        posts = [
            make_post_row(2, "second", datetime(2023, 6, 15)),
            make_post_row(1, "first", datetime(2023, 6, 10)),
        ]
        items = ET.fromstring(build(posts)).find("channel").findall("item")
        assert len(items) == 2
        assert [item.findtext("link") for item in items] == [
            "https://blog.example.com/posts/second",
            "https://blog.example.com/posts/first",
        ]
        first = items[0]
        assert first.findtext("title") == "Title 2"
        assert first.findtext("guid") == first.findtext("link")
        assert first.findtext("pubDate") == "Thu, 15 Jun 2023 00:00:00 GMT"
        assert first.findtext("description") == "Excerpt 2"

    def test_text_is_escaped(self):
        post = make_post_row(
            1,
            "escaping",
            datetime(2023, 6, 15),
            title="Tips & <Tricks>",
            excerpt="Ends with ]]> and <b>bold</b>"
        )
        document = build([post], base_url="https://blog.example.com?a=1&b=2")
        item = ET.fromstring(document).find("channel").find("item")
        assert item.findtext("title") == "Tips & <Tricks>"
        assert item.findtext("description") == "Ends with ]]> and <b>bold</b>"
        assert "<![CDATA[" in document

    def test_characters_xml_cannot_carry_are_dropped(self):
        post = make_post_row(
            1,
            "control-chars",
            datetime(2023, 6, 15),
            title="Bad \x0b title\x00",
            excerpt="Bell \x07 inside"
        )
        item = ET.fromstring(build([post])).find("channel").find("item")
        assert item.findtext("title") == "Bad  title"
        assert item.findtext("description") == "Bell  inside"

    def test_self_link(self):
        channel = ET.fromstring(build([])).find("channel")
        atom_link = channel.find("{http://www.w3.org/2005/Atom}link")
        assert atom_link.attrib["href"] == "https://blog.example.com/rss.xml"
        assert atom_link.attrib["rel"] == "self"


class TestRssHelpers:
    def test_rfc1123_converts_to_gmt(self):
        value = datetime(2023, 6, 15, 12, 0, tzinfo=timezone.utc)
        assert rfc1123(value) == "Thu, 15 Jun 2023 12:00:00 GMT"

    def test_cdata_splits_terminator(self):
        assert cdata("a]]>b") == "<![CDATA[a]]]]><![CDATA[>b]]>"

    def test_xml_text_escapes_and_strips(self):
        assert xml_text("a & b\x1f <c>") == "a &amp; b &lt;c&gt;"


class TestRssEndpoint:
    def test_feed_matches_all_posts(self, client, storage, five_posts):
        response = client.get("/rss.xml")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/xml")
        items = ET.fromstring(response.text).find("channel").findall("item")
        assert [item.findtext("guid") for item in items] == [
            f"http://testserver/posts/{post.slug}" for post in storage.get_all_posts()
        ]

    def test_empty_feed(self, client):
        response = client.get("/rss.xml")
        assert response.status_code == 200
        assert ET.fromstring(response.text).find("channel").findall("item") == []

    def test_configured_base_url(self, memory_storage):
        settings = Settings(app_env="test", base_url="https://devblog.example.com/", log_level="WARNING")
        client = TestClient(create_app(storage=memory_storage, settings=settings))
        channel = ET.fromstring(client.get("/rss.xml").text).find("channel")
        assert channel.findtext("link") == "https://devblog.example.com"

    def test_feed_failure_is_plain_text(self, memory_storage, test_settings, monkeypatch):
        def broken():
            raise RuntimeError("storage is down")

        monkeypatch.setattr(memory_storage, "get_all_posts", broken)
        client = TestClient(create_app(storage=memory_storage, settings=test_settings))
        response = client.get("/rss.xml")
        assert response.status_code == 500
        assert response.text == "Error generating RSS feed"
        assert response.headers["content-type"].startswith("text/plain")

    def test_feed_stays_well_formed_with_control_characters(self, client):
        response = client.post("/api/posts", json={
            "title": "Bad \u000b title",
            "slug": "bad-title",
            "excerpt": "Excerpt",
            "content": "Content",
            "readingTime": "1 min read"
        })
        assert response.status_code == 201
        items = ET.fromstring(client.get("/rss.xml").text).find("channel").findall("item")
        assert [item.findtext("title") for item in items] == ["Bad  title"]
