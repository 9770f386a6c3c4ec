"""File handling utilities for PromptQA documents."""

import json
from pathlib import Path
from typing import Any
import yaml

YAML_SUFFIXES = (".yaml", ".yml")


class FileHandler:
    """Read and write the JSON/YAML documents the CLI works with."""

    @staticmethod
    def load_text(filepath: Path) -> str:
        """Load text file content."""
        return Path(filepath).read_text(encoding='utf-8')

    @staticmethod
    def save_text(filepath: Path, content: str) -> Path:
        """Save text content to file."""
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        filepath.write_text(content, encoding='utf-8')
        return filepath

    @staticmethod
    def load_json(filepath: Path) -> Any:
        """Load JSON file."""
        return json.loads(Path(filepath).read_text(encoding='utf-8'))

    @staticmethod
    def load_yaml(filepath: Path) -> Any:
        """Load YAML file."""
        return yaml.safe_load(Path(filepath).read_text(encoding='utf-8'))

    @staticmethod
    def load_document(filepath: Path) -> Any:
        """Load JSON or YAML, chosen by file suffix."""
        if Path(filepath).suffix.lower() in YAML_SUFFIXES:
            return FileHandler.load_yaml(filepath)
        return FileHandler.load_json(filepath)
