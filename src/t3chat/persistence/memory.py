"""Process-local persistence, used when no backend is configured."""

from t3chat.persistence.base import ChatRecord, PersistenceClient
from t3chat.utils.logging import get_logger


logger = get_logger(__name__)


class InMemoryPersistence(PersistenceClient):
    """Keeps chats in a dict keyed by chat id."""

    def __init__(self) -> None:
        self.chats: dict[str, ChatRecord] = {}

    async def create_chat_if_not_exists(
        self,
        chat_id: str,
        title: str,
        first_user_message: str,
        assistant_response: str,
        user_id: str | None = None,
    ) -> None:
        if chat_id in self.chats:
            logger.debug("Chat already recorded", chat_id=chat_id)
            return

        self.chats[chat_id] = ChatRecord(
            chat_id=chat_id,
            title=title,
            first_user_message=first_user_message,
            assistant_response=assistant_response,
            user_id=user_id,
        )
        logger.info("Chat recorded", chat_id=chat_id, title=title)
