import logging

from ....models.schemas.ask import AskRequest
from .messages import ChatMessages, ImageMessages, TextOnlyMessages
from .prompts import PromptsManager

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful legal assistant. Provide clear, concise, and accurate information. "
    "Your answers should be in the same language as the user's question (English, French, or Arabic)."
)


class PromptWrapper:
    """封装系统提示词读取与上游消息序列构建的通用逻辑。"""

    def __init__(
        self,
        prompts_manager: PromptsManager,
        prompts_scene: str = "legal_assistant",
        prompts_template: str = "default",
        default_image_prompt: str = "What is in this image?",
    ):
        self.prompts_manager = prompts_manager
        self.prompts_scene = prompts_scene
        self.prompts_template = prompts_template
        self.default_image_prompt = default_image_prompt
        self.system_prompt = self._load_system_prompt()

    def _load_system_prompt(self) -> str:
        prompt = self.prompts_manager.get_prompt(self.prompts_scene, self.prompts_template)
        if not prompt:
            logger.warning(
                f"未找到提示词模板 (scene={self.prompts_scene}, "
                f"template={self.prompts_template})，使用默认系统提示词"
            )
            return DEFAULT_SYSTEM_PROMPT
        return prompt

    def build_messages(self, request: AskRequest) -> ChatMessages:
        """根据是否携带图片 URL 选择消息形态"""
        if request.image_url:
            return ImageMessages(
                prompt=request.question or self.default_image_prompt,
                image_url=request.image_url,
            )
        return TextOnlyMessages(system_prompt=self.system_prompt, question=request.question)
