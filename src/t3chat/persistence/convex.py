"""Convex-backed persistence over its HTTP mutation API."""

import httpx

from t3chat.core.exceptions import PersistenceError
from t3chat.persistence.base import PersistenceClient
from t3chat.utils.logging import get_logger


logger = get_logger(__name__)

CREATE_CHAT_MUTATION = "mutations:createChatIfNotExists"


class ConvexPersistence(PersistenceClient):
    """
    Records chats through a Convex deployment.

    Usage:
        persistence = ConvexPersistence(http, "https://x.convex.cloud", deploy_key)
        await persistence.create_chat_if_not_exists(chat_id, title, question, answer)
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        url: str,
        deploy_key: str = "",
        timeout: float = 10.0,
    ):
        self._http = http
        self._url = url.rstrip("/")
        self._deploy_key = deploy_key
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._deploy_key:
            headers["Authorization"] = f"Convex {self._deploy_key}"
        return headers

    async def create_chat_if_not_exists(
        self,
        chat_id: str,
        title: str,
        first_user_message: str,
        assistant_response: str,
        user_id: str | None = None,
    ) -> None:
        args = {
            "chatId": chat_id,
            "title": title,
            "firstUserMessage": first_user_message,
            "assistantResponse": assistant_response,
        }
        if user_id:
            args["userId"] = user_id

        try:
            response = await self._http.post(
                f"{self._url}/api/mutation",
                json={"path": CREATE_CHAT_MUTATION, "args": args, "format": "json"},
                headers=self._headers(),
                timeout=self._timeout,
            )
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise PersistenceError(f"Convex mutation failed: {e}") from e

        if body.get("status") == "error":
            raise PersistenceError(f"Convex mutation rejected: {body.get('errorMessage', 'unknown')}")

        logger.info("Chat recorded", chat_id=chat_id, backend="convex")
