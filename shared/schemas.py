# =============================================================================
# Pi Camera VLM Logger - Chat Completions Schemas
# =============================================================================
# Pydantic models defining the data contract with the OpenAI-compatible
# inference server (e.g. llama.cpp's llama-server).  The client sends one
# user message holding an instruction and a base64 JPEG data URI, and reads
# the description back from choices[0].message.content.
#
# Response models ignore unknown fields so that servers adding usage,
# timings or other metadata still validate.
# =============================================================================

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class TextPart(BaseModel):
    """Instruction text content part."""

    type: Literal["text"] = "text"
    text: str


class ImageUrl(BaseModel):
    """
    Image reference carried by an image content part.

    Attributes:
        url: A ``data:image/jpeg;base64,...`` URI.
    """

    url: str


class ImagePart(BaseModel):
    """Image content part wrapping an ``ImageUrl``."""

    type: Literal["image_url"] = "image_url"
    image_url: ImageUrl


class UserMessage(BaseModel):
    """A single user turn containing text and image parts."""

    role: Literal["user"] = "user"
    content: List[Union[TextPart, ImagePart]]


class ChatCompletionRequest(BaseModel):
    """
    Body of ``POST /v1/chat/completions``.

    Attributes:
        model:      Model name reported to the server.
        messages:   Conversation; this client always sends one user message.
        max_tokens: Upper bound on generated tokens.
        stream:     Always False; the client waits for the full response.
    """

    model: str
    messages: List[UserMessage]
    max_tokens: int = Field(..., ge=1)
    stream: bool = False

    @classmethod
    def for_image(
        cls,
        model: str,
        instruction: str,
        image_data_uri: str,
        max_tokens: int,
    ) -> "ChatCompletionRequest":
        """Build a single-turn request asking about one image."""
        return cls(
            model=model,
            messages=[
                UserMessage(
                    content=[
                        TextPart(text=instruction),
                        ImagePart(image_url=ImageUrl(url=image_data_uri)),
                    ]
                )
            ],
            max_tokens=max_tokens,
            stream=False,
        )


class ContentPart(BaseModel):
    """One part of list-style message content; only ``text`` is read."""

    model_config = ConfigDict(extra="ignore")

    text: Optional[str] = None


class AssistantMessage(BaseModel):
    """
    Message returned in a choice.

    ``content`` is usually a string; some servers return a list of parts.
    """

    model_config = ConfigDict(extra="ignore")

    content: Optional[Union[str, List[ContentPart]]] = None

    def text(self) -> str:
        """Return the message text with list parts joined, stripped."""
        if isinstance(self.content, list):
            return "".join(part.text for part in self.content if part.text).strip()
        return (self.content or "").strip()


class Choice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: AssistantMessage


class ChatCompletionResponse(BaseModel):
    """
    Successful response body.

    Only ``choices`` is required; an empty list is valid here and is
    rejected later by the client.  Metadata such as ``id``, ``model`` or
    ``usage`` is ignored whatever its type.
    """

    model_config = ConfigDict(extra="ignore")

    choices: List[Choice]
