"""CRUD service generation from the local schema."""

from hosby.codegen.service import GeneratedService, ServiceAI, ServiceGenerator
from hosby.codegen.templates import render_service

__all__ = [
    "GeneratedService",
    "ServiceAI",
    "ServiceGenerator",
    "render_service",
]
