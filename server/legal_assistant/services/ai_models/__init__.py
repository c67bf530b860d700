"""AI 模型模块"""

from .language import OpenRouterChatAdapter, PromptWrapper

__all__ = ["OpenRouterChatAdapter", "PromptWrapper"]
