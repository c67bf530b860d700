"""提示词管理模块"""

from .prompts_manager import PromptsManager

__all__ = ["PromptsManager"]
