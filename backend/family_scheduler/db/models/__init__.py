"""ORM models exposed for metadata discovery."""
from family_scheduler.db.models.agent_action_log import AgentActionLog
from family_scheduler.db.models.conversation import Conversation
from family_scheduler.db.models.conversation_message import ConversationMessage

__all__ = [
    "AgentActionLog",
    "Conversation",
    "ConversationMessage",
]
