"""Read-only export views of a snippet."""

import json
from typing import Any, Dict

from ..qa.models import Snippet
from ..templates import render


def export_document(snippet: Snippet) -> Dict[str, Any]:
    """Structured export; ``inputs_schema`` only for workflows."""
    doc = {
        "id": snippet.id,
        "type": snippet.type or "prompt",
        "version": snippet.normalized_version,
        "category": snippet.category or None,
        "audience": snippet.audience or None,
        "title": snippet.title,
        "description": snippet.description,
        "tags": list(snippet.tags or []),
        "provider": snippet.provider or None,
        "scope": snippet.scope,
        "template": snippet.content_text,
        "created_at": snippet.created_at or None,
        "updated_at": snippet.updated_at or None,
    }
    if snippet.is_workflow:
        doc["inputs_schema"] = snippet.inputs_schema
    return doc


def export_as_json(snippet: Snippet) -> str:
    return json.dumps(export_document(snippet), indent=2, ensure_ascii=False)


def export_as_markdown(snippet: Snippet) -> str:
    """Front-matter Markdown with the inputs schema (workflows) and fenced template."""
    return render("snippet.md", s=snippet)


def template_as_markdown(snippet: Snippet) -> str:
    return f"```text\n{snippet.content_text}\n```"
