"""Schema inference strategies: structural (type declarations) and AI."""

from hosby.infer.base import SchemaInferencer, make_inferencer
from hosby.infer.providers import AI_PROVIDERS, ProviderSpec, get_provider

__all__ = [
    "AI_PROVIDERS",
    "ProviderSpec",
    "SchemaInferencer",
    "get_provider",
    "make_inferencer",
]
