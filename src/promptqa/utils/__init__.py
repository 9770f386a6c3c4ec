"""Utility modules for PromptQA."""

from .file_handler import FileHandler
from .export import export_as_json, export_as_markdown, export_document, template_as_markdown

__all__ = ["FileHandler", "export_as_json", "export_as_markdown", "export_document", "template_as_markdown"]
