"""Legal AI Assistant：把问题流式转发给 OpenRouter 上的对话模型。"""

__version__ = "0.1.0"
