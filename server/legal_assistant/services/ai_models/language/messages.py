"""
上游对话消息序列

两种形态用带标签的联合类型表示：
- text：一条 system 指令 + 一条 user 问题
- image：一条 user 消息，内容为文本片段 + 图片 URL 片段
"""

from typing import Annotated, Dict, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class TextOnlyMessages(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    system_prompt: str
    question: str

    def to_openai(self) -> List[Dict]:
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": self.question},
        ]


class ImageMessages(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["image"] = "image"
    prompt: str
    image_url: str

    def to_openai(self) -> List[Dict]:
        return [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": self.prompt},
                    {"type": "image_url", "image_url": {"url": self.image_url}},
                ],
            }
        ]


ChatMessages = Annotated[Union[TextOnlyMessages, ImageMessages], Field(discriminator="kind")]
