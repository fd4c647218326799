"""LLM provider adapters.

Two concrete implementations of ILLMProvider (src/interfaces/llm_provider.py):
    - OpenAILLMProvider — gpt-4o-mini (also any OpenAI-compatible API)
    - OllamaLLMProvider — local models via an Ollama server (llama3.1)

main.py picks OpenAI when OPENAI_API_KEY is set and Ollama otherwise.
"""

from src.providers.llm.ollama_provider import OllamaLLMProvider
from src.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["OpenAILLMProvider", "OllamaLLMProvider"]
