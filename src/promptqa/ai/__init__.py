"""Model invocation adapter for PromptQA."""

from .client import AnthropicInvoker, split_messages

__all__ = ["AnthropicInvoker", "split_messages"]
