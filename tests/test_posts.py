import pytest
from datetime import datetime
from fastapi import status
from devblog.schemas.post import PostResponse
from devblog.schemas.tag import PostTagCreate, TagCreate


@pytest.fixture
def test_post_data():
    return {
        "title": "Test Post",
        "excerpt": "A short summary",
        "content": "This is a test post content",
        "readingTime": "2 min read",
        "coverImage": "https://example.com/cover.png"
    }


def assert_newest_first(posts):
    dates = [post["publishedAt"] for post in posts]
    assert dates == sorted(dates, reverse=True)


class TestPostListing:
    def test_list_posts_second_page(self, client, five_posts):
        """page=2&limit=2 over five posts returns the 3rd and 4th newest"""
        response = client.get("/api/posts", params={"page": 2, "limit": 2})
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [post["slug"] for post in data["posts"]] == [five_posts[2].slug, five_posts[3].slug]
        assert data["pagination"] == {"total": 5, "page": 2, "limit": 2, "totalPages": 3}

    def test_list_posts_defaults(self, client, five_posts):
        response = client.get("/api/posts")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert len(data["posts"]) == 5
        assert_newest_first(data["posts"])
        assert data["pagination"] == {"total": 5, "page": 1, "limit": 6, "totalPages": 1}

    def test_list_posts_includes_tags(self, client, storage, make_post):
        post = make_post("tagged", datetime(2024, 1, 1))
        tag = storage.create_tag(TagCreate(name="React"))
        storage.add_tag_to_post(PostTagCreate(post_id=post.id, tag_id=tag.id))

        data = client.get("/api/posts").json()
        assert data["posts"][0]["tags"] == [{"id": tag.id, "name": "React", "slug": "react"}]

    def test_list_posts_camel_case_fields(self, client, make_post):
        make_post("fields", datetime(2024, 1, 1), cover_image="https://example.com/c.png")
        post = client.get("/api/posts").json()["posts"][0]
        for field in ("coverImage", "publishedAt", "readingTime", "authorId"):
            assert field in post
        assert "published_at" not in post

    def test_list_posts_empty(self, client):
        data = client.get("/api/posts").json()
        assert data["posts"] == []
        assert data["pagination"]["total"] == 0
        assert data["pagination"]["totalPages"] == 0

    def test_list_posts_far_past_the_end(self, client, five_posts):
        response = client.get("/api/posts", params={"page": 10 ** 19, "limit": 2})
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["posts"] == []
        assert data["pagination"]["total"] == 5
        assert data["pagination"]["totalPages"] == 3

    @pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"page": "abc"}])
    def test_invalid_pagination(self, client, params):
        response = client.get("/api/posts", params=params)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"].startswith("Validation error")


class TestPostRetrieval:
    def test_featured_post(self, client, five_posts):
        response = client.get("/api/posts/featured")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["slug"] == five_posts[0].slug
        assert data["tags"] == []

    def test_featured_post_empty(self, client):
        response = client.get("/api/posts/featured")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == "No featured post found"

    def test_get_post_by_slug(self, client, make_post):
        make_post("hello-world", datetime(2024, 1, 1))
        response = client.get("/api/posts/hello-world")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["slug"] == "hello-world"

    def test_get_missing_post(self, client):
        response = client.get("/api/posts/missing")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == "Post not found"


class TestPostCreation:
    def test_create_post(self, client, test_post_data):
        response = client.post("/api/posts", json=test_post_data)
        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["title"] == test_post_data["title"]
        assert data["slug"] == "test-post"
        assert data["coverImage"] == test_post_data["coverImage"]
        assert "id" in data
        assert "publishedAt" in data

    def test_create_post_with_explicit_fields(self, client, test_post_data):
        test_post_data.update({"slug": "custom-slug", "publishedAt": "2023-06-15T10:00:00Z"})
        data = client.post("/api/posts", json=test_post_data).json()
        assert data["slug"] == "custom-slug"
        assert data["publishedAt"].startswith("2023-06-15T10:00:00")

    def test_create_post_missing_field(self, client, test_post_data):
        del test_post_data["excerpt"]
        response = client.post("/api/posts", json=test_post_data)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "excerpt" in response.json()["detail"]

    def test_create_post_bad_slug(self, client, test_post_data):
        test_post_data["slug"] = "not a slug!"
        response = client.post("/api/posts", json=test_post_data)
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_create_duplicate_slug(self, client, test_post_data):
        client.post("/api/posts", json=test_post_data)
        response = client.post("/api/posts", json=test_post_data)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Post slug already exists"


class TestPostUpdate:
    def test_update_post(self, client, make_post):
        make_post("draft", datetime(2024, 1, 1))
        response = client.patch("/api/posts/draft", json={"title": "Final title", "readingTime": "9 min read"})
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["title"] == "Final title"
        assert data["readingTime"] == "9 min read"
        assert data["slug"] == "draft"

    def test_update_slug(self, client, make_post):
        make_post("draft", datetime(2024, 1, 1))
        response = client.patch("/api/posts/draft", json={"slug": "published"})
        assert response.status_code == status.HTTP_200_OK
        assert client.get("/api/posts/published").status_code == status.HTTP_200_OK
        assert client.get("/api/posts/draft").status_code == status.HTTP_404_NOT_FOUND

    def test_update_to_taken_slug(self, client, make_post):
        make_post("first", datetime(2024, 1, 1))
        make_post("second", datetime(2024, 1, 2))
        response = client.patch("/api/posts/second", json={"slug": "first"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Post slug already exists"

    def test_update_missing_post(self, client):
        response = client.patch("/api/posts/missing", json={"title": "x"})
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestPostDeletion:
    def test_delete_post(self, client, storage, make_post):
        post = make_post("gone", datetime(2024, 1, 1))
        tag = storage.create_tag(TagCreate(name="RSS"))
        storage.add_tag_to_post(PostTagCreate(post_id=post.id, tag_id=tag.id))

        response = client.delete("/api/posts/gone")
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert client.get("/api/posts/gone").status_code == status.HTTP_404_NOT_FOUND
        assert storage.get_tags_by_post_id(post.id) == []
        assert client.get("/api/tags/rss/posts").json() == []

    def test_delete_missing_post(self, client):
        response = client.delete("/api/posts/missing")
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestPostTagOperations:
    def test_add_tag_to_post(self, client, storage, make_post):
        post = make_post("tagged", datetime(2024, 1, 1))
        tag = storage.create_tag(TagCreate(name="MDX"))

        response = client.post("/api/posts/tagged/tags/mdx")
        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["postId"] == post.id
        assert data["tagId"] == tag.id

        # adding twice keeps a single link
        client.post("/api/posts/tagged/tags/mdx")
        tags = client.get("/api/posts/tagged").json()["tags"]
        assert [t["slug"] for t in tags] == ["mdx"]

    def test_remove_tag_from_post(self, client, storage, make_post):
        make_post("tagged", datetime(2024, 1, 1))
        storage.create_tag(TagCreate(name="MDX"))
        client.post("/api/posts/tagged/tags/mdx")

        response = client.delete("/api/posts/tagged/tags/mdx")
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert client.get("/api/posts/tagged").json()["tags"] == []

        response = client.delete("/api/posts/tagged/tags/mdx")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_add_unknown_tag(self, client, make_post):
        make_post("tagged", datetime(2024, 1, 1))
        response = client.post("/api/posts/tagged/tags/unknown")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == "Tag not found"


class TestPostResponseModel:
    def test_stored_rows_are_not_held_to_request_limits(self):
        post = PostResponse(
            id=1,
            slug="legacy",
            title="x" * 300,
            excerpt="",
            content="",
            reading_time="",
            published_at=datetime(2024, 1, 1)
        )
        assert len(post.title) == 300
        assert post.model_dump(by_alias=True)["readingTime"] == ""
