"""Claude API adapter for running rendered prompts."""

from typing import Any, Dict, List, Optional, Tuple

import anthropic

from ..config import Config
from ..logger import get_logger

logger = get_logger(__name__)


def split_messages(messages: List[Dict[str, str]]) -> Tuple[str, List[Dict[str, str]]]:
    """Fold system messages into one system string and merge consecutive turns of the same role."""
    system_parts = []
    turns: List[Dict[str, str]] = []
    for message in messages:
        role, content = message.get("role"), message.get("content", "")
        if role == "system":
            system_parts.append(content)
            continue
        if turns and turns[-1]["role"] == role:
            turns[-1]["content"] += "\n\n" + content
        else:
            turns.append({"role": role, "content": content})
    return "\n\n".join(system_parts), turns


class AnthropicInvoker:
    """Async model call: ``await invoker(messages, execution_config)`` -> ``{"raw_text": ...}``."""

    def __init__(self, client: Optional[Any] = None, model: Optional[str] = None):
        self.client = client or anthropic.AsyncAnthropic(api_key=Config.ANTHROPIC_API_KEY)
        self.model = model or Config.MODEL

    async def __call__(self, messages: List[Dict[str, str]],
                       execution_config: Dict[str, Any]) -> Dict[str, Any]:
        system, turns = split_messages(messages)
        temperature = execution_config.get("temperature")
        max_tokens = execution_config.get("max_tokens")
        kwargs = {
            "model": execution_config.get("model") or self.model,
            "max_tokens": max_tokens if max_tokens is not None else Config.MAX_TOKENS,
            "temperature": temperature if temperature is not None else Config.DEFAULT_TEMPERATURE,
            "messages": turns,
        }
        if system:
            kwargs["system"] = system

        logger.debug("calling %s with %d message(s)", kwargs["model"], len(turns))
        response = await self.client.messages.create(**kwargs)
        text = "".join(block.text for block in response.content if getattr(block, "type", "") == "text")
        return {"raw_text": text}
