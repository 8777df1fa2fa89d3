"""
Tests for the service layer with a mocked document store.
"""
import json
import re
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from orchis.client.auth import AdminIdentity
from orchis.config import Config, StripeConfig
from orchis.errors import CallableFunctionError, CheckoutError, StorageError, SubmissionError, UnsplashError
from orchis.models.content import BlogPost, ContactMessage, WaitlistSignup
from orchis.models.photo import Photo
from orchis.models.tool import ToolSubmission
from orchis.pipeline.analytics import AnalyticsAggregator
from orchis.services.analytics import AnalyticsService
from orchis.services.checkout import FeaturedCheckout, tier_for
from orchis.services.content import BlogService, InboxService
from orchis.services.dashboard import DashboardService
from orchis.services.likes import LikeRegistry
from orchis.services.tickets import TicketService
from orchis.services.tools import ToolDirectory


NOW = datetime(2024, 5, 15, 14, 30, tzinfo=timezone.utc)


@pytest.fixture
def store() -> MagicMock:
    store = MagicMock()
    store.SERVER_TIMESTAMP = "SERVER_TIMESTAMP"
    store.increment.side_effect = lambda n=1: ("INCREMENT", n)
    return store


@pytest.fixture
def aggregator() -> AnalyticsAggregator:
    return AnalyticsAggregator(resolution_ratio=0.8, response_time="2.3h", recent_limit=10)


class TestAnalyticsService:
    """Tests for analytics loading and degradation."""

    def test_no_user_skips_store(self, store, aggregator):
        report = AnalyticsService(store, aggregator).get_analytics("a1", "daily", user_id=None, now=NOW)

        assert report.is_empty
        assert len(report.chart_data) == 24
        store.get_documents.assert_not_called()

    def test_reads_agent_subcollections(self, store, aggregator):
        def documents(path, filters=None, **kwargs):
            if path.endswith("sessionDetails"):
                return [{
                    "id": "s1",
                    "anonymousUserId": "anon",
                    "startTime": NOW - timedelta(minutes=10),
                    "timezone": "Europe/London",
                }]
            return []

        store.get_documents.side_effect = documents

        report = AnalyticsService(store, aggregator).get_analytics("a1", "daily", user_id="u1", now=NOW)

        paths = [c.args[0] for c in store.get_documents.call_args_list]
        assert paths == [
            "users/u1/agents/a1/dailyStats",
            "users/u1/agents/a1/sessionDetails",
            "users/u1/agents/a1/conversations",
        ]
        stats_filters = store.get_documents.call_args_list[0].kwargs["filters"]
        assert stats_filters == [("date", ">=", "2024-05-14")]
        assert report.summary.total_sessions == 1
        assert report.location_data[0].country == "GB"

    def test_fetch_failure_returns_empty_report(self, store, aggregator):
        store.get_documents.side_effect = RuntimeError("permission denied")

        report = AnalyticsService(store, aggregator).get_analytics("a1", "weekly", user_id="u1", now=NOW)

        assert report.is_empty
        assert len(report.chart_data) == 7

    def test_knowledge_gaps_sorted(self, store, aggregator):
        store.get_documents.return_value = [
            {"id": "g1", "question": "Refunds?", "count": 2},
            {"id": "g2", "question": "Shipping?", "count": 9},
        ]

        gaps = AnalyticsService(store, aggregator).get_knowledge_gaps("a1", "u1")

        assert [g.id for g in gaps] == ["g2", "g1"]
        assert store.get_documents.call_args.kwargs["filters"] == [("filled", "!=", True)]

    def test_knowledge_gaps_failure(self, store, aggregator):
        store.get_documents.side_effect = RuntimeError("boom")

        assert AnalyticsService(store, aggregator).get_knowledge_gaps("a1", "u1") == []


class TestTicketService:
    """Tests for ticket writes and queries."""

    def test_create_ticket(self, store):
        store.add_document.return_value = "tk1"

        ticket = TicketService(store).create_ticket("a1", {"title": "Widget down", "category": "bug"})

        assert ticket.id == "tk1"
        path, payload = store.add_document.call_args.args
        assert path == "tickets"
        assert payload["agentId"] == "a1"
        assert payload["status"] == "new"
        assert payload["priority"] == "medium"
        assert payload["createdAt"] == "SERVER_TIMESTAMP"

    def test_create_ticket_reraises(self, store):
        store.add_document.side_effect = RuntimeError("offline")

        with pytest.raises(RuntimeError):
            TicketService(store).create_ticket("a1", {"title": "x"})

    def test_resolve_stamps_resolved_at(self, store):
        TicketService(store).update_ticket_status("tk1", "resolved", "Restarted the widget")

        path, ticket_id, update = store.update_document.call_args.args
        assert (path, ticket_id) == ("tickets", "tk1")
        assert update["resolvedAt"] == "SERVER_TIMESTAMP"
        assert update["resolutionNotes"] == "Restarted the widget"

    def test_in_progress_has_no_resolved_at(self, store):
        TicketService(store).update_ticket_status("tk1", "in_progress", "ignored")

        update = store.update_document.call_args.args[2]
        assert "resolvedAt" not in update
        assert "resolutionNotes" not in update

    def test_filters(self, store):
        store.get_documents.return_value = [{"id": "tk1", "agentId": "a1", "title": "x", "status": "new"}]

        tickets = TicketService(store).get_agent_tickets("a1", status="new", priority="high", limit=5)

        kwargs = store.get_documents.call_args.kwargs
        assert kwargs["filters"] == [("agentId", "==", "a1"), ("status", "==", "new"), ("priority", "==", "high")]
        assert kwargs["order_by"] == "createdAt"
        assert kwargs["descending"] is True
        assert kwargs["limit"] == 5
        assert tickets[0].id == "tk1"

    def test_ticket_analytics(self, store):
        store.get_documents.return_value = [
            {"id": "tk1", "agentId": "a1", "title": "x", "status": "closed",
             "createdAt": NOW - timedelta(hours=1), "resolvedAt": NOW},
        ]

        analytics = TicketService(store).get_ticket_analytics("a1", "daily", NOW)

        assert analytics.summary.total_tickets == 1
        assert analytics.summary.resolution_rate == 100


class TestDashboardService:
    """Tests for the concurrent dashboard load."""

    def test_activity_failure_degrades(self, aggregator):
        analytics = MagicMock()
        analytics.aggregator = aggregator
        analytics.get_analytics.return_value = aggregator.empty_report("daily", NOW)
        tickets = MagicMock()
        tickets.get_recent_activity.side_effect = RuntimeError("index missing")

        data = DashboardService(analytics, tickets).load("a1", "u1", "daily", NOW)

        assert data.recent_activity == []
        assert len(data.analytics.chart_data) == 24

    def test_both_loaded(self, aggregator):
        analytics = MagicMock()
        analytics.aggregator = aggregator
        analytics.get_analytics.return_value = aggregator.empty_report("weekly", NOW)
        tickets = MagicMock()
        tickets.get_recent_activity.return_value = []

        data = DashboardService(analytics, tickets).load("a1", "u1", "weekly", NOW)

        analytics.get_analytics.assert_called_once_with("a1", "weekly", "u1", NOW)
        tickets.get_recent_activity.assert_called_once_with("a1")
        assert data.analytics.time_range == "weekly"


class TestLikeRegistry:
    """Tests for the local like registry."""

    def test_machine_id_persisted(self, tmp_path):
        path = tmp_path / "likes.json"
        machine_id = LikeRegistry(path).machine_id

        assert re.fullmatch(r"user_\d+_[a-z0-9]{9}", machine_id)
        assert LikeRegistry(path).machine_id == machine_id

    def test_add_and_remove(self, tmp_path):
        path = tmp_path / "likes.json"
        registry = LikeRegistry(path)

        registry.add("t1")
        assert LikeRegistry(path).is_liked("t1")

        registry.remove("t1")
        assert not LikeRegistry(path).is_liked("t1")
        assert json.loads(path.read_text())["likedTools"] == []

    def test_corrupt_file_ignored(self, tmp_path):
        path = tmp_path / "likes.json"
        path.write_text("{not json")

        registry = LikeRegistry(path)

        assert registry.liked_tools == set()


class TestToolDirectory:
    """Tests for the tool directory service."""

    @pytest.fixture
    def functions(self) -> MagicMock:
        functions = MagicMock()
        functions.take_screenshot.return_value = {"screenshotUrl": "https://shot/quill.png"}
        return functions

    @pytest.fixture
    def storage(self) -> MagicMock:
        storage = MagicMock()
        storage.upload_logo.return_value = "https://storage/logos/quill.png"
        return storage

    @pytest.fixture
    def directory(self, store, functions, storage) -> ToolDirectory:
        return ToolDirectory(store, functions, storage, Config())

    @pytest.fixture
    def submission(self) -> ToolSubmission:
        return ToolSubmission(name="Quill Writer", website_url="https://quill.example", categories=["Writing"])

    def test_submit_tool(self, directory, store, storage, submission):
        store.add_document.return_value = "new-tool"

        tool_id = directory.submit_tool(submission, b"png", "logo.png")

        assert tool_id == "new-tool"
        storage.upload_logo.assert_called_once_with("quill-writer", "logo.png", b"png", content_type="image/png")
        path, payload = store.add_document.call_args.args
        assert path == "tools"
        assert payload["slug"] == "quill-writer"
        assert payload["status"] == "pending"
        assert payload["upvotesCount"] == 0
        assert payload["source"] == "free_submission"
        assert payload["logoUrl"] == "https://storage/logos/quill.png"
        assert payload["screenshotUrl"] == "https://shot/quill.png"
        assert payload["websiteUrl"] == "https://quill.example"

    def test_submit_requires_category(self, directory, store):
        submission = ToolSubmission(name="Quill", website_url="https://q.example")

        with pytest.raises(SubmissionError, match="category"):
            directory.submit_tool(submission, b"png")

        store.add_document.assert_not_called()

    def test_submit_requires_name_and_logo(self, directory, submission):
        nameless = submission.model_copy(update={"name": "!!!"})

        with pytest.raises(SubmissionError, match="name"):
            directory.submit_tool(nameless, b"png")
        with pytest.raises(SubmissionError, match="logo"):
            directory.submit_tool(submission, None)

    def test_logo_failure_aborts(self, directory, store, storage, submission):
        storage.upload_logo.side_effect = StorageError("quota")

        with pytest.raises(StorageError):
            directory.submit_tool(submission, b"png")

        store.add_document.assert_not_called()

    def test_screenshot_failure_continues(self, directory, store, functions, submission):
        functions.take_screenshot.side_effect = CallableFunctionError("takeScreenshot", "timeout")

        directory.submit_tool(submission, b"png")

        assert store.add_document.call_args.args[1]["screenshotUrl"] == ""

    def test_search(self, directory, store):
        approved = [
            {"id": "a", "name": "Writer AI", "categories": ["Writing"], "status": "approved", "upvotesCount": 3},
            {"id": "b", "name": "Notes", "isFeatured": True, "featuredPrice": 100, "status": "approved"},
            {"id": "c", "name": "Calendar", "status": "approved", "upvotesCount": 10},
            {"id": "d", "name": "Mail", "status": "approved", "upvotesCount": 20},
        ]
        same_category = [
            {"id": "d", "name": "Mail", "categories": ["Writing"], "status": "approved", "upvotesCount": 20},
            {"id": "e", "name": "Draft", "categories": ["Writing"], "status": "approved", "upvotesCount": 15},
            {"id": "a", "name": "Writer AI", "categories": ["Writing"], "status": "approved", "upvotesCount": 3},
        ]
        store.get_documents.side_effect = [approved, approved, same_category]

        results = directory.search("writer")

        assert [s.tool.id for s in results.results] == ["a"]
        assert [t.id for t in results.featured] == ["b"]
        assert [t.id for t in results.popular] == ["d", "c"]
        assert [t.id for t in results.related] == ["e"]
        popular = {t.id for t in results.popular}
        assert not popular & {t.id for t in results.related}

        related_call = store.get_documents.call_args_list[-1]
        assert ("categories", "array_contains", "Writing") in related_call.kwargs["filters"]
        assert related_call.kwargs["order_by"] == "upvotesCount"
        assert related_call.kwargs["limit"] == 8

        path, key, payload = store.set_document.call_args.args
        assert (path, key) == ("searchTerms", "writer")
        assert payload["searchCount"] == ("INCREMENT", 1)
        assert payload["resultCount"] == 1
        assert store.set_document.call_args.kwargs["merge"] is True

    def test_search_failure_returns_empty(self, directory, store):
        store.get_documents.side_effect = RuntimeError("offline")

        results = directory.search("writer")

        assert results.total == 0
        assert results.popular == []

    def test_short_terms_not_tracked(self, directory, store):
        directory.track_search_term("a", 0)

        store.set_document.assert_not_called()

    def test_tracking_failure_swallowed(self, directory, store):
        store.set_document.side_effect = RuntimeError("denied")

        directory.track_search_term("writer", 2)

    def test_browse(self, directory, store):
        store.get_documents.return_value = [
            {"id": "a", "name": "Alpha", "categories": ["Design"], "status": "approved"},
            {"id": "b", "name": "Beta", "categories": ["Design"], "status": "pending"},
            {"id": "c", "name": "Gamma", "categories": ["Analytics"], "status": "verified", "isFeatured": True},
        ]

        page = directory.browse("design", "name_asc")

        assert page.selected_category == "Design"
        assert [t.id for t in page.tools] == ["a"]
        assert page.category_counts == {"Analytics": 1, "Design": 1}

        everything = directory.browse(None, "name_asc")
        assert [t.id for t in everything.tools] == ["c", "a"]

    def test_get_tool_falls_back_to_id(self, directory, store):
        store.get_documents.return_value = []
        store.get_document.return_value = {"id": "abc", "name": "Quill"}

        tool = directory.get_tool("abc")

        assert tool.name == "Quill"
        store.get_document.assert_called_once_with("tools", "abc")

    def test_toggle_like(self, directory, store, tmp_path):
        registry = LikeRegistry(tmp_path / "likes.json")

        assert directory.toggle_like("t1", registry) is True
        assert store.update_document.call_args.args[2] == {"upvotesCount": ("INCREMENT", 1)}

        assert directory.toggle_like("t1", registry) is False
        assert store.update_document.call_args.args[2] == {"upvotesCount": ("INCREMENT", -1)}
        assert not registry.is_liked("t1")

    def test_set_status_records_admin(self, directory, store):
        directory.set_status("t1", "approved", AdminIdentity(uid="admin-1"))

        update = store.update_document.call_args.args[2]
        assert update["status"] == "approved"
        assert update["reviewedBy"] == "admin-1"

    def test_admin_stats(self, directory, store):
        store.get_documents.return_value = [
            {"id": "a", "status": "approved", "isFeatured": True},
            {"id": "b", "status": "pending"},
            {"id": "c", "status": "verified"},
        ]

        assert directory.admin_stats() == {"total": 3, "approved": 1, "pending": 1, "featured": 1}


class TestFeaturedCheckout:
    """Tests for featured-listing checkout."""

    @pytest.mark.parametrize("amount,tier", [
        (19, "Standard"),
        (99, "Standard"),
        (100, "Medium"),
        (500, "High"),
        (1000, "Premium"),
    ])
    def test_tiers(self, amount, tier):
        assert tier_for(amount) == tier

    def test_amount_raised_to_minimum(self):
        functions = MagicMock()
        functions.create_checkout_session.return_value = {"sessionId": "cs_123"}

        session = FeaturedCheckout(functions, StripeConfig()).start("t1", 5)

        functions.create_checkout_session.assert_called_once_with("t1", 19)
        assert session.amount == 19
        assert session.url == "https://checkout.stripe.com/c/pay/cs_123"
        assert session.tier == "Standard"

    def test_backend_error(self):
        functions = MagicMock()
        functions.create_checkout_session.side_effect = CallableFunctionError("createCheckoutSession", "declined")

        with pytest.raises(CheckoutError, match="declined"):
            FeaturedCheckout(functions, StripeConfig()).start("t1", 100)

    def test_missing_session_id(self):
        functions = MagicMock()
        functions.create_checkout_session.return_value = {}

        with pytest.raises(CheckoutError):
            FeaturedCheckout(functions, StripeConfig()).start("t1", 100)


class TestBlogAndInbox:
    """Tests for blog and inbound form services."""

    def test_save_new_post_computes_read_time(self, store):
        store.add_document.return_value = "post-1"
        post = BlogPost(title="Launch Week", content=" ".join(["word"] * 450))

        saved = BlogService(store).save_post(post)

        assert saved.id == "post-1"
        assert saved.read_time == 3
        payload = store.add_document.call_args.args[1]
        assert payload["readTime"] == 3
        assert payload["slug"] == "launch-week"
        assert payload["createdAt"] == "SERVER_TIMESTAMP"

    def test_update_existing_post(self, store):
        post = BlogPost(id="post-1", title="Launch Week", content="short")

        BlogService(store).save_post(post)

        path, post_id, payload = store.update_document.call_args.args
        assert (path, post_id) == ("blogPosts", "post-1")
        assert "createdAt" not in payload
        store.add_document.assert_not_called()

    def test_select_image_reports_download(self, store):
        unsplash = MagicMock()
        photo = Photo(id="p1", url="r", small_url="s", thumb_url="t", download_url="https://dl")
        post = BlogPost(title="Launch")

        BlogService(store, unsplash).select_image(post, photo)

        unsplash.trigger_download.assert_called_once_with("https://dl")
        assert post.featured_image["url"] == "r"

    def test_find_images_degrades(self, store):
        unsplash = MagicMock()
        unsplash.search_photos.side_effect = UnsplashError(503, "unavailable")

        assert BlogService(store, unsplash).find_images("desk") == []

    def test_contact_and_waitlist(self, store):
        store.add_document.return_value = "doc-1"
        inbox = InboxService(store)

        inbox.submit_contact(ContactMessage(name="Ada", email="ada@example.com", message="Hi"))
        assert store.add_document.call_args.args[0] == "contacts"
        assert store.add_document.call_args.args[1]["submittedAt"] == "SERVER_TIMESTAMP"

        inbox.join_waitlist(WaitlistSignup(email="ada@example.com"))
        assert store.add_document.call_args.args[0] == "waitlist"
