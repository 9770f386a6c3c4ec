"""Jinja2 templates for generated text: repair prompts and Markdown export."""

import json
from typing import Any, Dict

import jinja2

TEMPLATES: Dict[str, str] = {
    "repair_system.txt": """\
You are a JSON repair engine. Your task is to fix the previous output to match the required schema EXACTLY.

CRITICAL RULES:
1. Output ONLY valid JSON - no markdown, no code fences, no commentary
2. Match the schema exactly - all required fields must be present
3. Preserve the original intent and data where possible
4. Fix only what's broken - don't change correct parts

The output will be validated programmatically. Any deviation from pure JSON or schema mismatch will fail.
""",

    "repair_user.txt": """\
The previous output failed validation with these issues:

{% for issue in issues %}
- [{{ issue.id }}] {{ issue.message }}{{ (" (at " ~ issue.path ~ ")") if issue.path else "" }}
{% endfor %}

FAILED OUTPUT:
{{ raw_output }}

REQUIRED SCHEMA:
{{ schema | tojson }}

Please output ONLY the corrected JSON that matches this schema exactly. No explanations, no markdown - just pure JSON.
""",

    "snippet.md": """\
---
title: "{{ s.title }}"
type: {{ s.type or "prompt" }}
version: {{ s.normalized_version }}
category: {{ s.category or "uncategorized" }}
audience: {{ s.audience or "both" }}
tags: [{{ s.tags | map("tojson") | join(", ") }}]
provider: {{ s.provider or "none" }}
scope: {{ s.scope }}
---

# {{ s.title }}

{{ s.description }}

{% if s.is_workflow and s.inputs_schema %}
## Inputs Schema

```json
{{ s.inputs_schema | tojson }}
```

{% endif %}
## Template

```text
{{ s.content_text }}
```
""",
}


def _tojson(value: Any, indent: int = 2) -> str:
    return json.dumps(value, indent=indent, ensure_ascii=False)


def _build_env() -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.DictLoader(TEMPLATES),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["tojson"] = _tojson
    return env


_ENV = _build_env()


def render(name: str, **context) -> str:
    """Render one of ``TEMPLATES`` by name."""
    return _ENV.get_template(name).render(**context)
