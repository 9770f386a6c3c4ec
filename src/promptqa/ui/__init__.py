"""Command-line interface for PromptQA."""
