"""Command-line interface for PromptQA."""

import asyncio
import json
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ..config import Config
from ..contrib import JsonSubmissionStore, SubmissionScorer
from ..errors import PromptQaError
from ..qa import (
    Snippet, evaluate_compliance, compliance_status, infer_modality, patch_snippet, qa_evaluate,
)
from ..spec import (
    PromptAsset, RuntimePrompt, patch_output, render_prompt, run_prompt_with_qa, run_qa,
    snippet_to_prompt, to_execution_payload, to_run_contract, validate_model_output,
    validate_prompt_asset,
)
from ..testpack import load_test_pack, run_assertions
from ..utils import FileHandler, export_as_json, export_as_markdown

app = typer.Typer(
    name="promptqa",
    help="Prompt quality assurance: scoring, patching, rendering and output validation"
)
console = Console()

LEVEL_STYLES = {"verified": "green", "draft": "yellow"}
SEVERITY_STYLES = {"error": "red", "warning": "yellow", "warn": "yellow", "info": "cyan"}


@contextmanager
def handle_errors():
    """Print a PromptQaError and exit with status 1."""
    try:
        yield
    except PromptQaError as e:
        console.print(f"[red]Error: {e}[/red]")
        for detail in getattr(e, "errors", []):
            console.print(f"  - {detail}")
        raise typer.Exit(1)


def load_document(path: Path) -> Any:
    """Read a JSON or YAML file, wrapping failures in PromptQaError."""
    if not path.exists():
        raise PromptQaError(f"File not found: {path}")
    try:
        return FileHandler.load_document(path)
    except OSError as e:
        raise PromptQaError(f"Could not read {path}: {e}") from e
    except (ValueError, yaml.YAMLError) as e:
        raise PromptQaError(f"Could not parse {path}: {e}") from e


def load_snippet(path: Path) -> Snippet:
    data = load_document(path)
    if not isinstance(data, dict):
        raise PromptQaError(f"{path} must contain an object")
    return Snippet.from_dict(data)


def load_prompt(path: Path) -> RuntimePrompt:
    """Runtime prompt documents have a ``content`` object; anything else is a snippet."""
    data = load_document(path)
    if not isinstance(data, dict):
        raise PromptQaError(f"{path} must contain an object")
    if isinstance(data.get("content"), dict):
        return RuntimePrompt.from_dict(data)
    return snippet_to_prompt(Snippet.from_dict(data))


def parse_inputs(pairs: Optional[List[str]]) -> Dict[str, str]:
    """``["topic=AI", "tone=calm"]`` -> ``{"topic": "AI", "tone": "calm"}``."""
    values = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Expected key=value, got: {pair}")
        values[key.strip()] = value
    return values


def read_text(path: Path) -> str:
    if not path.exists():
        raise PromptQaError(f"File not found: {path}")
    return FileHandler.load_text(path)


def print_json(data: Any):
    console.print_json(json.dumps(data, ensure_ascii=False))


def issues_table(issues, title: str = "Issues") -> Table:
    table = Table(title=title)
    table.add_column("Severity")
    table.add_column("Code")
    table.add_column("Message")
    for issue in issues:
        severity = getattr(issue, "severity", None) or getattr(issue, "level", "")
        style = SEVERITY_STYLES.get(severity, "white")
        code = getattr(issue, "code", None) or getattr(issue, "id", "")
        table.add_row(f"[{style}]{severity}[/{style}]", code, issue.message)
    return table


@app.command()
def qa(
    snippet_file: Path = typer.Argument(..., help="Snippet JSON/YAML file"),
    input: Optional[List[str]] = typer.Option(None, "--input", "-i", help="Input value as key=value"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result as JSON"),
):
    """Score a prompt with its modality's rubric."""
    with handle_errors():
        snippet = load_snippet(snippet_file)
        result = qa_evaluate(snippet, parse_inputs(input) or None)

    if as_json:
        print_json(result.to_dict())
        return

    style = LEVEL_STYLES.get(result.level, "white")
    modality = result.modality + (f" / {result.subtype}" if result.subtype else "")
    console.print(Panel(
        f"Score: [bold]{result.score}[/bold]\n"
        f"Level: [{style}]{result.level}[/{style}]\n"
        f"Modality: {modality}",
        title=snippet.title or snippet.id or "QA Result"
    ))
    if result.issues:
        console.print(issues_table(result.issues))


@app.command()
def patch(
    snippet_file: Path = typer.Argument(..., help="Snippet JSON/YAML file"),
    write: Optional[Path] = typer.Option(None, "--write", "-w", help="Write the patched prompt here"),
):
    """Append scaffolding for missing sections."""
    with handle_errors():
        snippet = load_snippet(snippet_file)
        result = patch_snippet(snippet)

    if not result.changed:
        console.print("[green]Nothing to patch.[/green]")
        return

    for change in result.changes:
        console.print(f"[cyan]+ {change.title}[/cyan]: {change.description}")
    console.print(f"Score: {result.qa_score_before} -> {result.qa_score_after}")

    if write:
        FileHandler.save_text(write, result.patched)
        console.print(f"[green]Patched prompt written to {write}[/green]")
    else:
        console.print(Panel(result.patched, title=f"Patched ({infer_modality(snippet).value})"))


@app.command()
def compliance(
    snippet_file: Path = typer.Argument(..., help="Snippet JSON/YAML file"),
):
    """Check a snippet's metadata and required blocks."""
    with handle_errors():
        snippet = load_snippet(snippet_file)
    issues = evaluate_compliance(snippet)
    status = compliance_status(issues)
    style = {"pass": "green", "warning": "yellow", "error": "red"}[status]
    console.print(f"Compliance: [{style}]{status}[/{style}]")
    if issues:
        console.print(issues_table(issues))
    if status == "error":
        raise typer.Exit(1)


@app.command("validate-asset")
def validate_asset(
    asset_file: Path = typer.Argument(..., help="Prompt asset JSON/YAML file"),
):
    """Validate a prompt asset's shape and consistency."""
    with handle_errors():
        data = load_document(asset_file)
    result = validate_prompt_asset(data)
    if result.ok:
        console.print("[green]Asset is valid.[/green]")
        return
    for error in result.errors:
        console.print(f"[red]- {error}[/red]")
    raise typer.Exit(1)


@app.command("asset-qa")
def asset_qa(
    asset_file: Path = typer.Argument(..., help="Prompt asset JSON/YAML file"),
    output_file: Path = typer.Argument(..., help="Model output to check"),
    input: Optional[List[str]] = typer.Option(None, "--input", "-i", help="Input value as key=value"),
    write: Optional[Path] = typer.Option(None, "--write", "-w", help="Write the patched output here"),
):
    """Run an asset's QA checks against an output, patching missing blocks if possible."""
    with handle_errors():
        data = load_document(asset_file)
        validation = validate_prompt_asset(data)
        if not validation.ok:
            raise PromptQaError("Invalid prompt asset: " + "; ".join(validation.errors))
        asset = PromptAsset.from_dict(data)
        output = read_text(output_file)

    inputs = parse_inputs(input)
    result = run_qa(asset, inputs, output)
    if result.passed:
        console.print("[green]All checks passed.[/green]")
        return

    table = Table(title="Failed checks")
    table.add_column("Check")
    table.add_column("Severity")
    table.add_column("Patchable")
    table.add_column("Message")
    for failure in result.failures:
        table.add_row(failure.check_id, failure.severity, "yes" if failure.patchable else "no",
                      failure.message or "")
    console.print(table)

    if not result.patchable:
        raise typer.Exit(1)
    patched = patch_output(asset, inputs, output)
    console.print(f"Added {len(patched.changes)} block(s); passes after patch: "
                  f"{patched.qa_result.passed}")
    if write:
        FileHandler.save_text(write, patched.patched)
        console.print(f"[green]Patched output written to {write}[/green]")


@app.command()
def submit(
    asset_file: Path = typer.Argument(..., help="Prompt asset JSON/YAML file"),
    submitter: str = typer.Option(..., "--submitter", "-s", help="Submitter id"),
):
    """Score a contributed asset and record the submission."""
    with handle_errors():
        data = load_document(asset_file)
    scorer = SubmissionScorer(store=JsonSubmissionStore(Config.ensure_dirs()))
    response = scorer.submit(data, submitter)

    if not response.success:
        console.print(f"[red]{response.error}[/red]")
    else:
        submission = response.submission
        console.print(Panel(
            f"Id: {submission.id}\n"
            f"Status: [bold]{submission.status.value}[/bold]\n"
            f"Score: {submission.score.score} (QA {submission.score.qa_score}, "
            f"compliance -{submission.score.compliance_penalty})",
            title="Submission"
        ))
    for step in response.next_steps:
        console.print(f"- {step}")
    if not response.success:
        raise typer.Exit(1)


@app.command()
def render(
    prompt_file: Path = typer.Argument(..., help="Runtime prompt or snippet JSON/YAML file"),
    input: Optional[List[str]] = typer.Option(None, "--input", "-i", help="Input value as key=value"),
):
    """Render a prompt and print the execution payload."""
    with handle_errors():
        prompt = load_prompt(prompt_file)
    rendered = render_prompt(prompt, parse_inputs(input))
    if not rendered.ok:
        for error in rendered.input_validation.errors:
            console.print(f"[red]- {error.field}: {error.message}[/red]")
        raise typer.Exit(1)
    print_json(to_execution_payload(rendered))


@app.command("check-output")
def check_output(
    prompt_file: Path = typer.Argument(..., help="Runtime prompt or snippet JSON/YAML file"),
    output_file: Path = typer.Argument(..., help="Raw model output"),
    input: Optional[List[str]] = typer.Option(None, "--input", "-i", help="Input value as key=value"),
):
    """Validate a saved model response against the prompt's output contract."""
    with handle_errors():
        prompt = load_prompt(prompt_file)
        raw = read_text(output_file)
    rendered = render_prompt(prompt, parse_inputs(input))
    result = validate_model_output(rendered, raw)
    if result.issues:
        console.print(issues_table(result.issues))
    if result.ok:
        console.print("[green]Output is valid.[/green]")
    else:
        console.print("[red]Output failed validation.[/red]")
        raise typer.Exit(1)


@app.command()
def run(
    prompt_file: Path = typer.Argument(..., help="Runtime prompt or snippet JSON/YAML file"),
    input: Optional[List[str]] = typer.Option(None, "--input", "-i", help="Input value as key=value"),
):
    """Render, call Claude, validate and repair; print the run contract."""
    from ..ai import AnthropicInvoker

    with handle_errors():
        prompt = load_prompt(prompt_file)
    rendered = render_prompt(prompt, parse_inputs(input))

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Running prompt...", total=None)
        result = asyncio.run(run_prompt_with_qa(rendered, AnthropicInvoker()))
        progress.update(task, completed=True)

    print_json(to_run_contract(rendered, result))
    if not result.ok:
        raise typer.Exit(1)


@app.command("test-pack")
def test_pack(
    pack_file: Path = typer.Argument(..., help="Test pack JSON/YAML file"),
    output_file: Path = typer.Argument(..., help="Output (or generated prompt) to check"),
):
    """Run a test pack's assertions against a saved output."""
    with handle_errors():
        pack = load_test_pack(pack_file)
        output = read_text(output_file)

    failed = 0
    for case in pack.test_cases:
        summary = run_assertions(output, case.assertions)
        failed += summary.failed
        console.print(f"[bold]{case.id}[/bold] {summary.passed}/{summary.total} passed")
        for result in summary.results:
            style = "green" if result.passed else "red"
            console.print(f"  [{style}]{result.message}[/{style}]")
    if failed:
        raise typer.Exit(1)


@app.command()
def export(
    snippet_file: Path = typer.Argument(..., help="Snippet JSON/YAML file"),
    format: str = typer.Option("json", help="Export format: json, markdown"),
    output: Optional[Path] = typer.Option(None, help="Output file path"),
):
    """Export a snippet as JSON or Markdown."""
    if format not in ("json", "markdown"):
        console.print(f"[red]Error: Unknown format: {format}[/red]")
        raise typer.Exit(1)
    with handle_errors():
        snippet = load_snippet(snippet_file)
    text = export_as_markdown(snippet) if format == "markdown" else export_as_json(snippet)
    if output:
        FileHandler.save_text(output, text)
        console.print(f"[green]Exported to {output}[/green]")
    else:
        console.print(text, markup=False, highlight=False)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
