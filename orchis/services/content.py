"""
Content services - blog, roadmap/changelog and inbound forms.
"""
import logging
from typing import Optional

import requests

from ..client.firestore import DocumentStore
from ..client.unsplash import UnsplashClient
from ..errors import UnsplashError
from ..models.photo import Photo
from ..models.content import (
    BlogPost,
    ChangelogEntry,
    ContactMessage,
    RoadmapItem,
    WaitlistSignup,
    estimate_read_time,
)
from ..pipeline.roadmap import TransitionHook, changelog_for_transition, sort_roadmap


logger = logging.getLogger(__name__)

BLOG_POSTS = "blogPosts"
ROADMAP_ITEMS = "admin/roadmap/items"
CHANGELOG_ITEMS = "admin/changelog/items"
CONTACTS = "contacts"
WAITLIST = "waitlist"


class BlogService:
    """Blog posts with slug and read time maintained on save."""

    def __init__(self, store: Optional[DocumentStore] = None, unsplash: Optional[UnsplashClient] = None):
        self.store = store or DocumentStore()
        self._unsplash = unsplash

    @property
    def unsplash(self) -> UnsplashClient:
        if self._unsplash is None:
            self._unsplash = UnsplashClient()
        return self._unsplash

    def find_images(self, query: Optional[str] = None, category: Optional[str] = None) -> list[Photo]:
        """Photos for the image picker; curated ones when no query is given."""
        try:
            if query:
                return self.unsplash.search_photos(query)
            if category:
                return self.unsplash.get_photos_by_category(category)
            return self.unsplash.get_featured_photos()
        except (UnsplashError, requests.RequestException) as e:
            logger.error(f"Error loading photos: {e}")
            return []

    def select_image(self, post: BlogPost, photo: Photo) -> BlogPost:
        """Use ``photo`` as the post's featured image and report the download."""
        self.unsplash.trigger_download(photo.download_url)
        post.featured_image = photo.to_featured_image()
        return post

    def list_posts(self, published_only: bool = False) -> list[BlogPost]:
        filters = [("published", "==", True)] if published_only else None
        try:
            docs = self.store.get_documents(BLOG_POSTS, filters=filters, order_by="createdAt", descending=True)
        except Exception as e:
            logger.error(f"Error loading blog posts: {e}")
            return []
        return [BlogPost.model_validate(d) for d in docs]

    def get_post_by_slug(self, slug: str) -> Optional[BlogPost]:
        try:
            docs = self.store.get_documents(BLOG_POSTS, filters=[("slug", "==", slug)], limit=1)
        except Exception as e:
            logger.error(f"Error loading blog post {slug}: {e}")
            return None
        return BlogPost.model_validate(docs[0]) if docs else None

    def save_post(self, post: BlogPost) -> BlogPost:
        """Create or update a post; read time is recomputed every save."""
        post.read_time = estimate_read_time(post.content)
        payload = post.to_document()
        payload.pop("createdAt", None)
        payload["updatedAt"] = self.store.SERVER_TIMESTAMP

        try:
            if post.id:
                self.store.update_document(BLOG_POSTS, post.id, payload)
            else:
                payload["createdAt"] = self.store.SERVER_TIMESTAMP
                post.id = self.store.add_document(BLOG_POSTS, payload)
        except Exception as e:
            logger.error(f"Error saving blog post {post.slug}: {e}")
            raise

        logger.info(f"Saved blog post {post.slug} ({post.read_time} min read)")
        return post

    def delete_post(self, post_id: str) -> None:
        try:
            self.store.delete_document(BLOG_POSTS, post_id)
        except Exception as e:
            logger.error(f"Error deleting blog post {post_id}: {e}")
            raise


class RoadmapService:
    """
    Roadmap items and the changelog.

    Saving runs every transition hook against the stored previous version;
    entries they return are committed in the same batch as the item, so a
    completed item always has exactly one entry.
    """

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        hooks: Optional[list[TransitionHook]] = None,
    ):
        self.store = store or DocumentStore()
        self.hooks = hooks if hooks is not None else [changelog_for_transition]

    def list_items(self) -> list[RoadmapItem]:
        try:
            docs = self.store.get_documents(ROADMAP_ITEMS)
        except Exception as e:
            logger.error(f"Error loading roadmap: {e}")
            return []
        return sort_roadmap([RoadmapItem.model_validate(d) for d in docs])

    def save_item(self, item: RoadmapItem) -> list[ChangelogEntry]:
        """
        Create or update a roadmap item.

        New items get their document id before the hooks run, so entries can
        reference them. Changelog entries and the item are committed in one
        batch; a failed save writes nothing and can simply be retried.

        Returns:
            Changelog entries written as a result of the transition
        """
        previous = None
        if item.id:
            doc = self.store.get_document(ROADMAP_ITEMS, item.id)
            previous = RoadmapItem.model_validate(doc) if doc else None
        else:
            item.id = self.store.new_document_id(ROADMAP_ITEMS)

        entries = []
        for hook in self.hooks:
            entry = hook(previous, item)
            if entry is not None:
                entries.append(entry)

        writes = []
        for entry in entries:
            entry.id = self.store.new_document_id(CHANGELOG_ITEMS)
            payload = entry.to_document()
            payload["releaseDate"] = self.store.SERVER_TIMESTAMP
            payload["createdAt"] = self.store.SERVER_TIMESTAMP
            writes.append(("set", CHANGELOG_ITEMS, entry.id, payload))

        payload = item.to_document()
        payload["updatedAt"] = self.store.SERVER_TIMESTAMP
        if previous is None:
            payload["createdAt"] = self.store.SERVER_TIMESTAMP
            writes.append(("set", ROADMAP_ITEMS, item.id, payload))
        else:
            writes.append(("update", ROADMAP_ITEMS, item.id, payload))

        try:
            self.store.write_batch(writes)
        except Exception as e:
            logger.error(f"Error saving roadmap item {item.title!r}: {e}")
            raise

        for entry in entries:
            logger.info(f"Added changelog entry {entry.id} for roadmap item {item.id}")
        return entries

    def delete_item(self, item_id: str) -> None:
        try:
            self.store.delete_document(ROADMAP_ITEMS, item_id)
        except Exception as e:
            logger.error(f"Error deleting roadmap item {item_id}: {e}")
            raise

    def list_changelog(self) -> list[ChangelogEntry]:
        try:
            docs = self.store.get_documents(CHANGELOG_ITEMS, order_by="releaseDate", descending=True)
        except Exception as e:
            logger.error(f"Error loading changelog: {e}")
            return []
        return [ChangelogEntry.model_validate(d) for d in docs]


class InboxService:
    """Contact form and waitlist submissions."""

    def __init__(self, store: Optional[DocumentStore] = None):
        self.store = store or DocumentStore()

    def submit_contact(self, message: ContactMessage) -> str:
        payload = message.to_document()
        payload["submittedAt"] = self.store.SERVER_TIMESTAMP
        try:
            return self.store.add_document(CONTACTS, payload)
        except Exception as e:
            logger.error(f"Error saving contact message from {message.email}: {e}")
            raise

    def join_waitlist(self, signup: WaitlistSignup) -> str:
        payload = signup.to_document()
        payload["createdAt"] = self.store.SERVER_TIMESTAMP
        try:
            return self.store.add_document(WAITLIST, payload)
        except Exception as e:
            logger.error(f"Error adding {signup.email} to waitlist: {e}")
            raise
