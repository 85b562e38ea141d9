from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"] = Field()
    content: str = Field()


class ChatCompletionRequest(BaseModel):
    """Body of an OpenAI-compatible chat completions call.

    Only the fields this application sends are modelled. Based on
    https://platform.openai.com/docs/api-reference/chat/create
    """

    model: str = Field()
    messages: List[ChatMessage] = Field()
    temperature: Optional[float] = Field(default=None)
    max_tokens: Optional[int] = Field(default=None)
    stream: bool = Field(default=True)

    def to_payload(self) -> dict:
        # Remove any None values; some OpenAI-compatible backends reject explicit nulls
        return self.model_dump(exclude_none=True)
