# src/textchain/plugins/backends/__init__.py
"""Step backends.

- substitute: local find/replace
- ChatCompletionsBackend: OpenAI and Groq
- AnthropicBackend: Anthropic messages API
- GoogleBackend: Google Generative AI via google-genai
"""

from textchain.plugins.backends.anthropic import AnthropicBackend
from textchain.plugins.backends.base import RewriteBackend, render_prompt
from textchain.plugins.backends.chat_completions import ChatCompletionsBackend
from textchain.plugins.backends.google import GoogleBackend
from textchain.plugins.backends.substitution import substitute

__all__ = [
    "AnthropicBackend",
    "ChatCompletionsBackend",
    "GoogleBackend",
    "RewriteBackend",
    "render_prompt",
    "substitute",
]
