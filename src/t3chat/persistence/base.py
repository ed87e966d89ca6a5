"""Abstract base class for chat persistence."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ChatRecord:
    """A chat as recorded after its first exchange."""

    chat_id: str
    title: str
    first_user_message: str
    assistant_response: str
    user_id: str | None = None


class PersistenceClient(ABC):
    """
    Abstract persistence interface.

    The router only ever records a new chat once its first answer has
    streamed. Implementations must be idempotent per chat id.
    """

    @abstractmethod
    async def create_chat_if_not_exists(
        self,
        chat_id: str,
        title: str,
        first_user_message: str,
        assistant_response: str,
        user_id: str | None = None,
    ) -> None:
        """
        Record a chat unless one with the same id already exists.

        Args:
            chat_id: Chat identifier supplied by the client
            title: Generated chat title
            first_user_message: The opening user message
            assistant_response: Full text of the first answer
            user_id: Owner, if known

        Raises:
            PersistenceError: If the backend rejects or fails the write
        """
        ...

    async def close(self) -> None:
        """Release backend resources."""
        return None
