"""语言模型适配器模块"""

from .base import BaseLanguageModel, FragmentStream
from .messages import ChatMessages, ImageMessages, TextOnlyMessages
from .openrouter_adapter import OpenRouterChatAdapter
from .prompt_wrapper import PromptWrapper

__all__ = [
    "BaseLanguageModel",
    "FragmentStream",
    "ChatMessages",
    "ImageMessages",
    "TextOnlyMessages",
    "OpenRouterChatAdapter",
    "PromptWrapper",
]
