from .assist import MAX_MODEL_INVOCATIONS, ConversationOrchestrator
from .parser import ResponseParser

__all__ = ["ConversationOrchestrator", "MAX_MODEL_INVOCATIONS", "ResponseParser"]
