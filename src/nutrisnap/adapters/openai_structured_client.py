"""OpenAI Responses API client for structured flow outputs."""

import json
import logging
from dataclasses import dataclass

from openai import AsyncOpenAI

from nutrisnap.services.flows import StructuredModelClient

logger = logging.getLogger(__name__)


@dataclass
class OpenAIStructuredClient(StructuredModelClient):
    """Structured model client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIStructuredClient":
        """Create an OpenAI structured output client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        schema_name: str,
        schema: dict[str, object],
        prompt: str,
        image_data_url: str | None = None,
    ) -> dict[str, object] | None:
        """Call OpenAI Responses API with a strict JSON schema."""
        content: list[dict[str, object]] = [{"type": "input_text", "text": prompt}]
        if image_data_url:
            content.append({"type": "input_image", "image_url": image_data_url})
        request_payload: dict[str, object] = {
            "model": model,
            "input": [{"role": "user", "content": content}],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": schema_name,
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": store,
        }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            return None
        try:
            parsed = json.loads(output_text)
        except json.JSONDecodeError:
            logger.warning("OpenAI returned non-JSON output", extra={"flow": schema_name})
            return None
        return parsed if isinstance(parsed, dict) else None

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
