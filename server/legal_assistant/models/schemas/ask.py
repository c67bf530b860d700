"""/ask 请求与事件模型。"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AskRequest(BaseModel):
    """浏览器提交的问题，question 与 imageUrl 至少提供一个。"""
    model_config = ConfigDict(populate_by_name=True)

    question: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")

    @property
    def has_input(self) -> bool:
        return bool(self.question) or bool(self.image_url)


class ErrorResponse(BaseModel):
    error: str


class ChunkEvent(BaseModel):
    chunk: str


class DoneEvent(BaseModel):
    done: bool = True


class ErrorEvent(BaseModel):
    error: str
