"""HTTP clients for the services routellm depends on but does not implement."""

from routellm.upstream.completions import CompletionBackend
from routellm.upstream.embeddings import EmbeddingProvider, OpenAIEmbeddingProvider

__all__ = ["CompletionBackend", "EmbeddingProvider", "OpenAIEmbeddingProvider"]
