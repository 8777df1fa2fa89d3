"""
Client for callable Cloud Functions.

Callables take ``{"data": payload}`` over HTTPS POST and answer with either
``{"result": ...}`` or ``{"error": {"message": ..., "status": ...}}``.
Calls are not retried: several of them (checkout, scraping) are not
idempotent.
"""
import logging
from typing import Any, Optional

import requests

from ..config import FirebaseConfig, get_config
from ..errors import CallableFunctionError


logger = logging.getLogger(__name__)


class CallableFunctions:
    """Invoke named callable functions of the Firebase project."""

    def __init__(
        self,
        config: Optional[FirebaseConfig] = None,
        session: Optional[requests.Session] = None,
        id_token: Optional[str] = None,
    ):
        self.config = config or get_config().firebase
        self.session = session or requests.Session()
        self.id_token = id_token

    def url_for(self, name: str) -> str:
        return f"{self.config.functions_base_url}/{name}"

    def call(self, name: str, payload: Optional[dict[str, Any]] = None) -> Any:
        """
        Invoke a callable function.

        Args:
            name: Function name, e.g. ``takeScreenshot``
            payload: JSON-serializable request data

        Returns:
            The function's ``result`` value

        Raises:
            CallableFunctionError: On transport failure or an error response
        """
        headers = {"Content-Type": "application/json"}
        if self.id_token:
            headers["Authorization"] = f"Bearer {self.id_token}"

        logger.info(f"Calling function {name}")
        try:
            resp = self.session.post(
                self.url_for(name),
                json={"data": payload or {}},
                headers=headers,
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as e:
            raise CallableFunctionError(name, f"request failed: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            body = {}

        error = body.get("error") if isinstance(body, dict) else None
        if error or resp.status_code != 200:
            error = error or {}
            message = error.get("message") or f"HTTP {resp.status_code}"
            logger.error(f"Function {name} failed: {message}")
            raise CallableFunctionError(name, message, error.get("status"), error.get("details"))

        return body.get("result")

    # Named callables used by the console

    def process_document(self, agent_id: str, file_name: str, content_base64: str) -> Any:
        return self.call("processDocument", {
            "agentId": agent_id,
            "fileName": file_name,
            "fileContent": content_base64,
        })

    def chat_with_agent(self, agent_id: str, message: str, session_id: Optional[str] = None) -> Any:
        return self.call("chatWithAgent", {"agentId": agent_id, "message": message, "sessionId": session_id})

    def get_agent_conversations(self, agent_id: str) -> Any:
        return self.call("getAgentConversations", {"agentId": agent_id})

    def delete_document(self, agent_id: str, document_id: str) -> Any:
        return self.call("deleteDocument", {"agentId": agent_id, "documentId": document_id})

    def create_checkout_session(self, tool_id: str, amount: int) -> dict[str, Any]:
        return self.call("createCheckoutSession", {"toolId": tool_id, "amount": amount}) or {}

    def take_screenshot(self, url: str, tool_id: str) -> dict[str, Any]:
        return self.call("takeScreenshot", {"url": url, "toolId": tool_id}) or {}

    def scrape_product_hunt(self) -> Any:
        return self.call("scrapeProductHuntManual")
