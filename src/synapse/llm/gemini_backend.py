from __future__ import annotations

import base64
from typing import Any, Dict, List, Optional, Sequence

from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from synapse.exceptions import GenerationError
from synapse.llm.generator import MediaPart


class GeminiBackend:
    """
    Google Gemini backend.

    Images are sent as data URLs, audio and video as inline media parts.
    """

    def __init__(
        self,
        *,
        model_name: str,
        api_key: Optional[str] = None,
        temperature: float = 0.2,
    ) -> None:
        if not api_key:
            raise ValueError("Gemini API key must be provided")

        self.model_name = model_name
        self.llm = ChatGoogleGenerativeAI(
            model=model_name,
            google_api_key=api_key,
            temperature=temperature,
        )

    @staticmethod
    def _content(prompt: str, attachments: Sequence[MediaPart]) -> List[Dict[str, Any]]:
        content: List[Dict[str, Any]] = [{"type": "text", "text": prompt}]
        for part in attachments:
            if part.mime_type.startswith("image/"):
                encoded = base64.b64encode(part.data).decode("ascii")
                content.append(
                    {
                        "type": "image_url",
                        "image_url": f"data:{part.mime_type};base64,{encoded}",
                    }
                )
            else:
                content.append(
                    {
                        "type": "media",
                        "mime_type": part.mime_type,
                        "data": part.data,
                    }
                )
        return content

    def generate(self, prompt: str, attachments: Sequence[MediaPart] = ()) -> str:
        message = HumanMessage(content=self._content(prompt, attachments))
        try:
            response = self.llm.invoke([message])
        except Exception as exc:
            raise GenerationError(f"{self.model_name} request failed: {exc}") from exc

        content = response.content
        if isinstance(content, str):
            return content.strip()
        # Multi-part replies come back as a list of strings and text blocks.
        texts = [
            block if isinstance(block, str) else str(block.get("text", ""))
            for block in content
        ]
        return "".join(texts).strip()
