from .base import LLMProvider
from .chat_completions import ChatCompletionsProvider

__all__ = ["LLMProvider", "ChatCompletionsProvider"]
