"""Shared fixtures."""

import copy

import pytest

VALID_ASSET = {
    "id": "123e4567-e89b-12d3-a456-426614174000",
    "version": "1.0.0",
    "name": "Blog outline",
    "description": "Outline a blog post for a given audience",
    "author": "docs-team",
    "createdAt": "2024-01-01T00:00:00Z",
    "updatedAt": "2024-01-02T08:30:00Z",
    "capability": "text-generation",
    "modality": "text",
    "status": "draft",
    "visibility": "public",
    "riskTier": "low",
    "tags": ["blog", "outline"],
    "userPromptTemplate": "Write an outline about {{topic}} for {{audience}}.",
    "inputSchema": {
        "type": "object",
        "properties": {
            "topic": {"type": "string", "description": "What the post is about"},
            "audience": {"type": "string"},
        },
        "required": ["topic"],
    },
    "outputBlocks": [
        {"key": "TITLE", "description": "Post title", "required": True},
        {"key": "OUTLINE", "description": "Section list", "required": True},
        {"key": "NOTES", "description": "Optional notes", "required": False},
    ],
    "qaChecks": [
        {"id": "required_blocks_present", "description": "All required blocks", "type": "structure",
         "severity": "error", "autoFix": True},
        {"id": "no_extra_blocks", "description": "No undeclared blocks", "type": "structure",
         "severity": "warning"},
        {"id": "min_length", "description": "Blocks are not trivially short", "type": "content",
         "severity": "warning"},
        {"id": "style_consistency", "description": "Consistent formatting", "type": "format",
         "severity": "info"},
        {"id": "schema_conformity", "description": "Inputs match the schema", "type": "semantic",
         "severity": "error"},
    ],
    "adapters": [{"provider": "anthropic", "model": "claude-sonnet-4-20250514", "temperature": 0.3}],
}


@pytest.fixture
def asset_data():
    """A fresh copy of a valid prompt asset document."""
    return copy.deepcopy(VALID_ASSET)


SUMMARY_SCHEMA = {
    "type": "object",
    "required": ["summary"],
    "properties": {"summary": {"type": "string"}},
}

WORKFLOW_DOC = {
    "id": "wf-product-summary",
    "title": "Product summary",
    "type": "workflow",
    "version": "2.0",
    "content": {
        "text": "Summarise {{product}} for {{ audience }}.\n\n"
                "Return JSON matching:\n{{output_schema}}\n\n"
                "Checks:\n{{quality_checks}}",
        "blocks": [
            {"type": "TASK", "content": "Summarise the product"},
            {"type": "INPUTS", "content": "product, audience"},
            {"type": "CONSTRAINTS", "content": "Under 50 words"},
            {"type": "OUTPUT_FORMAT", "content": "JSON"},
            {"type": "QUALITY_CHECKS", "content": "- Mentions the product"},
        ],
    },
    "inputs": [
        {"key": "product", "label": "Product", "type": "text", "required": True,
         "validation": {"min": 3}},
        {"key": "audience", "label": "Audience", "type": "select",
         "options": ["buyers", "sellers"], "default": "buyers"},
    ],
    "outputs": {"format": "json", "schema": SUMMARY_SCHEMA},
    "quality": {"fallback": {"onSchemaFail": "repair_json", "maxRetries": 2}},
    "execution": {"systemPrompt": "You are concise.", "model": "claude-test",
                  "temperature": 0.5, "maxTokens": 500},
}


@pytest.fixture
def workflow_doc():
    """A fresh copy of a JSON-output workflow document."""
    return copy.deepcopy(WORKFLOW_DOC)
