"""Descriptive documentation generators: architecture, API reference, user guide."""

from .api_docs import ApiDocumentation, collect_api_documentation, render_api_documentation
from .architecture import ArchitectureInventory, build_inventory, render_architecture
from .user_guide import build_user_guide

__all__ = [
    "ApiDocumentation",
    "ArchitectureInventory",
    "build_inventory",
    "build_user_guide",
    "collect_api_documentation",
    "render_api_documentation",
    "render_architecture",
]
