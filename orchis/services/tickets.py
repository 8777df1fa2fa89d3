"""
Ticket service - support tickets raised against agents.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from ..client.firestore import DocumentStore
from ..models.analytics import TicketAnalytics, TimeRange
from ..models.ticket import CLOSED_STATUSES, Ticket, TicketActivity
from ..pipeline.analytics import TimeBuckets, build_ticket_analytics


logger = logging.getLogger(__name__)

TICKETS = "tickets"


class TicketService:
    """CRUD and reporting over the ``tickets`` collection. Errors propagate."""

    def __init__(self, store: Optional[DocumentStore] = None):
        self.store = store or DocumentStore()

    def create_ticket(self, agent_id: str, data: dict[str, Any]) -> Ticket:
        """Create a ``new`` ticket with category/priority defaults applied."""
        ticket = Ticket.model_validate({**data, "agent_id": agent_id, "status": "new"})
        payload = ticket.to_document()
        payload["createdAt"] = self.store.SERVER_TIMESTAMP
        payload["updatedAt"] = self.store.SERVER_TIMESTAMP

        try:
            ticket.id = self.store.add_document(TICKETS, payload)
        except Exception as e:
            logger.error(f"Error creating ticket: {e}")
            raise
        logger.info(f"Created ticket {ticket.id} for agent {agent_id}")
        return ticket

    def get_agent_tickets(
        self,
        agent_id: str,
        status: Optional[str] = None,
        category: Optional[str] = None,
        priority: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Ticket]:
        """Tickets for an agent, newest first."""
        filters = [("agentId", "==", agent_id)]
        if status:
            filters.append(("status", "==", status))
        if category:
            filters.append(("category", "==", category))
        if priority:
            filters.append(("priority", "==", priority))

        docs = self.store.get_documents(TICKETS, filters=filters, order_by="createdAt", descending=True, limit=limit)
        return [Ticket.model_validate(d) for d in docs]

    def update_ticket_status(self, ticket_id: str, status: str, resolution_notes: Optional[str] = None) -> None:
        """Set a ticket's status; closing statuses stamp ``resolvedAt``."""
        update: dict[str, Any] = {"status": status, "updatedAt": self.store.SERVER_TIMESTAMP}
        if status in CLOSED_STATUSES:
            update["resolvedAt"] = self.store.SERVER_TIMESTAMP
            if resolution_notes:
                update["resolutionNotes"] = resolution_notes

        try:
            self.store.update_document(TICKETS, ticket_id, update)
        except Exception as e:
            logger.error(f"Error updating ticket status: {e}")
            raise

    def get_ticket_analytics(
        self,
        agent_id: str,
        time_range: TimeRange = "daily",
        now: Optional[datetime] = None,
    ) -> TicketAnalytics:
        now = now or datetime.now(timezone.utc)
        since = TimeBuckets(time_range, now).start
        docs = self.store.get_documents(
            TICKETS,
            filters=[("agentId", "==", agent_id), ("createdAt", ">=", since)],
            order_by="createdAt",
        )
        return build_ticket_analytics([Ticket.model_validate(d) for d in docs], time_range, now)

    def get_recent_activity(self, agent_id: str, limit: int = 10) -> list[TicketActivity]:
        """Most recently updated tickets."""
        docs = self.store.get_documents(
            TICKETS,
            filters=[("agentId", "==", agent_id)],
            order_by="updatedAt",
            descending=True,
            limit=limit,
        )
        return [TicketActivity.model_validate(d) for d in docs]
