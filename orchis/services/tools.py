"""
Tool directory service - submission, search, browse, moderation and likes.
"""
import logging
from typing import Any, Optional

from ..client.auth import AdminIdentity
from ..client.firestore import DocumentStore
from ..client.functions import CallableFunctions
from ..client.storage import LogoStorage
from ..config import Config, get_config
from ..errors import OrchisError, StorageError, SubmissionError
from ..models.content import generate_slug
from ..models.search import BrowsePage, SearchResults
from ..models.tool import ToolListing, ToolStatus, ToolSubmission
from ..pipeline.search import (
    DEFAULT_SORT,
    count_categories,
    featured_tools,
    filter_by_category,
    popular_tools,
    rank_tools,
    related_tools,
    slug_to_category,
    sort_for_browse,
)
from .likes import LikeRegistry


logger = logging.getLogger(__name__)

TOOLS = "tools"
SEARCH_TERMS = "searchTerms"


class ToolDirectory:
    """
    The public tool directory.

    Reads degrade to empty results on failure; writes log and re-raise.
    """

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        functions: Optional[CallableFunctions] = None,
        storage: Optional[LogoStorage] = None,
        config: Optional[Config] = None,
    ):
        self.config = config or get_config()
        self.store = store or DocumentStore()
        self.functions = functions or CallableFunctions(self.config.firebase)
        self.storage = storage or LogoStorage()

    def _tools(self, docs: list[dict[str, Any]]) -> list[ToolListing]:
        return [ToolListing.model_validate(d) for d in docs]

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit_tool(
        self,
        submission: ToolSubmission,
        logo: Optional[bytes],
        logo_filename: str = "logo.png",
        logo_content_type: str = "image/png",
    ) -> str:
        """
        Submit a tool for moderation.

        The logo is required and a failed upload aborts the submission. The
        website screenshot is best effort.

        Returns:
            Id of the new ``pending`` listing

        Raises:
            SubmissionError: Missing category, name or logo
            StorageError: Logo upload failed
        """
        if not submission.categories:
            raise SubmissionError("Please select at least one category.")
        slug = generate_slug(submission.name)
        if not slug:
            raise SubmissionError("Tool name cannot be empty.")
        if not logo:
            raise SubmissionError("Please upload a logo file.")

        try:
            logo_url = self.storage.upload_logo(slug, logo_filename, logo, content_type=logo_content_type)
        except StorageError:
            logger.error(f"Submission of {slug} aborted: logo upload failed")
            raise

        screenshot_url = ""
        if self.config.enable_screenshots:
            try:
                result = self.functions.take_screenshot(submission.website_url, slug)
                screenshot_url = result.get("screenshotUrl") or ""
            except OrchisError as e:
                logger.warning(f"Screenshot failed for {submission.website_url}, continuing: {e}")

        payload = submission.to_document()
        payload.update({
            "logoUrl": logo_url,
            "screenshotUrl": screenshot_url,
            "slug": slug,
            "status": "pending",
            "upvotesCount": 0,
            "source": "free_submission",
            "createdAt": self.store.SERVER_TIMESTAMP,
            "updatedAt": self.store.SERVER_TIMESTAMP,
        })

        try:
            tool_id = self.store.add_document(TOOLS, payload)
        except Exception as e:
            logger.error(f"Error submitting tool {slug}: {e}")
            raise
        logger.info(f"Submitted tool {slug} as {tool_id}")
        return tool_id

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_tool(self, slug_or_id: str) -> Optional[ToolListing]:
        """Look up a listing by slug, then by document id."""
        try:
            docs = self.store.get_documents(TOOLS, filters=[("slug", "==", slug_or_id)], limit=1)
            if docs:
                return ToolListing.model_validate(docs[0])
            doc = self.store.get_document(TOOLS, slug_or_id)
        except Exception as e:
            logger.error(f"Error loading tool {slug_or_id}: {e}")
            return None
        return ToolListing.model_validate(doc) if doc else None

    def search(self, query: str) -> SearchResults:
        """
        Rank approved tools against ``query`` and assemble the side lists.

        Returns empty results when the query is blank or loading fails.
        """
        query = (query or "").strip()
        if not query:
            return SearchResults(query=query)

        search = self.config.search
        try:
            approved = self._tools(self.store.get_documents(TOOLS, filters=[("status", "==", "approved")]))
            results = SearchResults(
                query=query,
                results=rank_tools(approved, query),
                featured=featured_tools(approved),
            )
            self.track_search_term(query, results.total)

            candidates = self._tools(self.store.get_documents(
                TOOLS,
                filters=[("status", "==", "approved")],
                order_by="createdAt",
                descending=True,
                limit=search.popular_candidates,
            ))
            shown = results.shown_ids()
            results.popular = popular_tools(candidates, shown, limit=search.popular_limit)
            shown |= {t.id for t in results.popular if t.id}

            if results.results and results.results[0].tool.categories:
                category = results.results[0].tool.categories[0]
                related = self._tools(self.store.get_documents(
                    TOOLS,
                    filters=[("status", "==", "approved"), ("categories", "array_contains", category)],
                    order_by="upvotesCount",
                    descending=True,
                    limit=search.related_candidates,
                ))
                results.related = related_tools(related, shown, limit=search.related_limit)
        except Exception as e:
            logger.error(f"Search failed for {query!r}: {e}")
            return SearchResults(query=query)

        logger.info(f"Search {query!r}: {results.total} results")
        return results

    def track_search_term(self, term: str, result_count: int) -> None:
        """Count a search term; failures never reach the caller."""
        if not self.config.enable_search_tracking:
            return
        key = (term or "").strip().lower()
        if len(key) < self.config.search.min_tracked_term_length:
            return
        # Document ids cannot contain slashes
        key = key.replace("/", " ")
        try:
            self.store.set_document(
                SEARCH_TERMS,
                key,
                {
                    "term": key,
                    "searchCount": self.store.increment(1),
                    "lastSearched": self.store.SERVER_TIMESTAMP,
                    "resultCount": result_count,
                },
                merge=True,
            )
        except Exception as e:
            logger.warning(f"Could not track search term {key!r}: {e}")

    def browse(self, category_slug: Optional[str] = None, sort: str = DEFAULT_SORT) -> BrowsePage:
        """Public listings with category facets, featured first."""
        try:
            tools = self._tools(self.store.get_documents(TOOLS, order_by="createdAt", descending=True))
        except Exception as e:
            logger.error(f"Error loading tools for browse: {e}")
            return BrowsePage(sort=sort)

        public = [t for t in tools if t.is_public]
        counts = count_categories(public)
        category = slug_to_category(category_slug, counts.keys())
        if category_slug and category_slug != "all" and category is None:
            logger.warning(f"Unknown category slug {category_slug!r}, showing all tools")

        return BrowsePage(
            tools=sort_for_browse(filter_by_category(public, category), sort),
            categories=list(counts),
            category_counts=counts,
            selected_category=category,
            sort=sort,
        )

    # ------------------------------------------------------------------
    # Moderation and engagement
    # ------------------------------------------------------------------

    def set_status(self, tool_id: str, status: ToolStatus, admin: AdminIdentity) -> None:
        """Move a listing through moderation. Requires a verified admin."""
        try:
            self.store.update_document(TOOLS, tool_id, {
                "status": status,
                "updatedAt": self.store.SERVER_TIMESTAMP,
                "reviewedBy": admin.uid,
            })
        except Exception as e:
            logger.error(f"Error setting status of tool {tool_id}: {e}")
            raise
        logger.info(f"Admin {admin.uid} set tool {tool_id} to {status}")

    def pending_tools(self) -> list[ToolListing]:
        try:
            return self._tools(self.store.get_documents(TOOLS, filters=[("status", "==", "pending")]))
        except Exception as e:
            logger.error(f"Error loading pending tools: {e}")
            return []

    def toggle_like(self, tool_id: str, registry: LikeRegistry) -> bool:
        """
        Like or unlike a tool for this machine.

        Returns:
            True when the tool is now liked
        """
        liked = registry.is_liked(tool_id)
        delta = -1 if liked else 1
        try:
            self.store.update_document(TOOLS, tool_id, {"upvotesCount": self.store.increment(delta)})
        except Exception as e:
            logger.error(f"Error updating likes for tool {tool_id}: {e}")
            raise

        if liked:
            registry.remove(tool_id)
        else:
            registry.add(tool_id)
        return not liked

    def admin_stats(self) -> dict[str, int]:
        """Listing counts for the admin overview; zeros when loading fails."""
        try:
            tools = self._tools(self.store.get_documents(TOOLS))
        except Exception as e:
            logger.error(f"Error loading admin stats: {e}")
            return {"total": 0, "approved": 0, "pending": 0, "featured": 0}

        return {
            "total": len(tools),
            "approved": sum(1 for t in tools if t.status == "approved"),
            "pending": sum(1 for t in tools if t.status == "pending"),
            "featured": sum(1 for t in tools if t.is_featured),
        }

    def trigger_scrape(self, admin: AdminIdentity) -> Any:
        """Run the Product Hunt import now."""
        logger.info(f"Admin {admin.uid} triggered Product Hunt scrape")
        return self.functions.scrape_product_hunt()
