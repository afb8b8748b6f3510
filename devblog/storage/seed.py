"""Demo content for a fresh store.

``seed_storage`` writes through the storage's public operations, so seed rows
obey the same constraints as anything created through the API.
"""

import logging
import re
from datetime import datetime
from typing import TYPE_CHECKING, List

from devblog.core.security import get_password_hash
from devblog.core.slugs import slugify
from devblog.schemas.post import PostCreate
from devblog.schemas.tag import PostTagCreate, TagCreate
from devblog.schemas.user import UserCreate

if TYPE_CHECKING:
    from devblog.storage.base import BlogStorage

logger = logging.getLogger(__name__)

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"

TAG_NAMES = [
    "Next.js", "MDX", "React", "Routing", "Web Development", "Advanced", "Components",
    "Performance", "Images", "Tailwind CSS", "Dark Mode", "CSS", "RSS", "SEO",
]

# Titles are scanned for these names to pick each post's tags
_TITLE_TAG_PATTERN = re.compile(
    r"Next\.js|MDX|React|Advanced|Components|Performance|Images|Tailwind CSS|Dark Mode|CSS|RSS|Web Development|SEO"
)

_UNSPLASH = "https://images.unsplash.com/photo-{}?auto=format&fit=crop&w=1470&q=80"

DEMO_POSTS = [
    {
        "slug": "getting-started-with-nextjs-and-mdx",
        "title": "Getting Started with Next.js and MDX",
        "excerpt": "Learn how to set up a blog with Next.js and MDX for powerful content management.",
        "content": (
            "# Getting Started with Next.js and MDX\n\n"
            "Next.js combined with MDX gives you a powerful platform for content-rich sites.\n\n"
            "## Setting Up Your Next.js Project\n\n"
            "```bash\nnpx create-next-app my-blog-app\ncd my-blog-app\n```\n"
        ),
        "cover_image": _UNSPLASH.format("1555066931-4365d14bab8c"),
        "published_at": datetime(2023, 6, 15),
        "reading_time": "5 min read",
    },
    {
        "slug": "creating-dynamic-routes-in-nextjs",
        "title": "Creating Dynamic Routes in Next.js",
        "excerpt": "Explore how to implement dynamic routing in Next.js for your blog posts and category pages.",
        "content": (
            "# Creating Dynamic Routes in Next.js\n\n"
            "Dynamic routes let you build pages whose paths depend on external data.\n\n"
            "## Understanding Dynamic Routes\n\n"
            "A file named `pages/posts/[slug].js` matches `/posts/hello-world`.\n"
        ),
        "cover_image": _UNSPLASH.format("1546900703-cf06143d1239"),
        "published_at": datetime(2023, 6, 10),
        "reading_time": "7 min read",
    },
    {
        "slug": "advanced-mdx-techniques",
        "title": "Advanced MDX Techniques",
        "excerpt": "Take your MDX skills to the next level with custom components and dynamic content.",
        "content": (
            "# Advanced MDX Techniques\n\n"
            "MDX lets you embed React components directly in your content.\n\n"
            "## Custom Components in MDX\n\n"
            "Pass a component map to your MDX provider to override any element.\n"
        ),
        "cover_image": _UNSPLASH.format("1555099962-4199c345e5dd"),
        "published_at": datetime(2023, 6, 5),
        "reading_time": "9 min read",
    },
    {
        "slug": "optimizing-images-in-nextjs",
        "title": "Optimizing Images in Next.js",
        "excerpt": "Learn best practices for image optimization in Next.js using the Image component.",
        "content": (
            "# Optimizing Images in Next.js\n\n"
            "The Image component resizes, lazy-loads and serves modern formats automatically.\n"
        ),
        "cover_image": _UNSPLASH.format("1517650862521-d580d5348145"),
        "published_at": datetime(2023, 5, 28),
        "reading_time": "6 min read",
    },
    {
        "slug": "implementing-dark-mode-with-tailwind-css",
        "title": "Implementing Dark Mode with Tailwind CSS",
        "excerpt": "A comprehensive guide to adding dark mode support to your Next.js blog.",
        "content": (
            "# Implementing Dark Mode with Tailwind CSS\n\n"
            "Enable the `class` strategy in `tailwind.config.js` and toggle `dark` on the root element.\n"
        ),
        "cover_image": _UNSPLASH.format("1541701494587-cb58502866ab"),
        "published_at": datetime(2023, 5, 20),
        "reading_time": "8 min read",
    },
    {
        "slug": "building-a-custom-rss-feed-for-your-blog",
        "title": "Building a Custom RSS Feed for Your Blog",
        "excerpt": "Step-by-step instructions for creating an RSS feed for your Next.js blog.",
        "content": (
            "# Building a Custom RSS Feed for Your Blog\n\n"
            "An RSS feed keeps a direct connection with your readers and helps search engines.\n"
        ),
        "cover_image": _UNSPLASH.format("1614064548237-096d2cfe18f2"),
        "published_at": datetime(2023, 5, 15),
        "reading_time": "4 min read",
    },
]


def tag_names_for_title(title: str) -> List[str]:
    """Known tag names mentioned in a title, first occurrence order, no repeats"""
    return list(dict.fromkeys(_TITLE_TAG_PATTERN.findall(title)))


def seed_storage(storage: "BlogStorage") -> bool:
    """Populate an empty store with demo data

    Returns False without writing anything when a user already exists.
    """
    if storage.count_users() > 0:
        logger.info("Storage already seeded, skipping...")
        return False

    logger.info("Seeding storage...")
    admin = storage.create_user(UserCreate(
        username=ADMIN_USERNAME,
        password=get_password_hash(ADMIN_PASSWORD)
    ))

    for name in TAG_NAMES:
        storage.create_tag(TagCreate(name=name, slug=slugify(name)))

    for post_data in DEMO_POSTS:
        post = storage.create_post(PostCreate(**post_data, author_id=admin.id))
        for tag_name in tag_names_for_title(post.title):
            tag = storage.get_tag_by_slug(slugify(tag_name))
            if tag:
                storage.add_tag_to_post(PostTagCreate(post_id=post.id, tag_id=tag.id))

    logger.info("Storage seeded successfully")
    return True
