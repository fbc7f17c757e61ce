"""
Spiegel Command Line Interface

Main entry point for the spiegel CLI.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
import yaml
from rich.console import Console

from spiegel.wizard.config import WizardConfig, load_config
from spiegel.wizard.exceptions import (
    NoMoreStepsError,
    SpiegelError,
    ValidationError,
    get_error_code,
)
from spiegel.wizard.logging_config import get_log_path, setup_logging
from spiegel.wizard.orchestrator import WizardOrchestrator
from spiegel.wizard.renderer import Page, StepRenderer
from spiegel.wizard.repository import StepRepository
from spiegel.wizard.ui import WizardUI

console = Console()


def _fail(error: SpiegelError):
    """Print a Spiegel error and exit with its code."""
    WizardUI(console).print_spiegel_error(error)
    sys.exit(get_error_code(error))


def _get_config(ctx: click.Context) -> WizardConfig:
    return ctx.obj["config"]


def _build_orchestrator(config: WizardConfig, title: str = "Spiegel") -> WizardOrchestrator:
    repository = StepRepository.from_config(config)
    renderer = StepRenderer(repository, Page(title=title))
    return WizardOrchestrator(repository, renderer, region=config.region)


def _load_context(path: Optional[str]) -> Dict[str, Any]:
    """Load a render context from a YAML or JSON file."""
    if not path:
        return {}
    try:
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ValidationError(f"Could not parse context file {path}", details=str(e))
    if not isinstance(data, dict):
        raise ValidationError(f"Context file {path} must contain a mapping", field="context")
    return data


@click.group()
@click.version_option(package_name="spiegel")
@click.option("--steps-dir", type=click.Path(file_okay=False), help="Steps directory (default: beside the application)")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Path to spiegel.yaml")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
@click.option("--log-file", is_flag=True, help="Also write a debug log to logs/ beside the steps directory")
@click.pass_context
def main(ctx: click.Context, steps_dir: Optional[str], config_path: Optional[str], verbose: bool, log_file: bool):
    """Spiegel: step-by-step wizard for externally installed steps"""
    level = logging.DEBUG if verbose else None
    setup_logging(level=level)
    try:
        config = load_config(
            config_path=Path(config_path) if config_path else None,
            steps_dir=steps_dir,
        )
    except SpiegelError as e:
        _fail(e)
    if log_file:
        setup_logging(level=level, log_file=get_log_path(config.steps_dir))
    ctx.obj = {"config": config}


@main.command()
@click.option("--with-sample", is_flag=True, help="Also create a sample 'welcome' step")
@click.option("--write-config", is_flag=True, help="Write spiegel.yaml in the current directory")
@click.pass_context
def init(ctx: click.Context, with_sample: bool, write_config: bool):
    """Create the steps directory and its manifest."""
    from spiegel.wizard.scaffold import create_step, create_steps_dir, write_config_file

    config = _get_config(ctx)
    ui = WizardUI(console)

    try:
        dir_created, manifest_created = create_steps_dir(config.steps_dir, config.manifest_name)
        if dir_created:
            ui.print_success(f"Created {config.steps_dir}")
        if manifest_created:
            ui.print_success(f"Created {config.manifest_path}")
        if not dir_created and not manifest_created:
            ui.print_info(f"Steps directory already set up at {config.steps_dir}")

        if with_sample:
            step_dir = create_step(
                config.steps_dir, "welcome", "Welcome",
                manifest_name=config.manifest_name,
                descriptor_name=config.descriptor_name,
            )
            ui.print_success(f"Created sample step at {step_dir}")

        if write_config:
            written = write_config_file(Path.cwd(), config.steps_dir, config.region)
            if written:
                ui.print_success(f"Wrote {written}")
            else:
                ui.print_warning("spiegel.yaml already exists, left unchanged")
    except SpiegelError as e:
        _fail(e)


@main.command("add-step")
@click.argument("name")
@click.option("--title", help="Heading shown in the generated view")
@click.pass_context
def add_step(ctx: click.Context, name: str, title: Optional[str]):
    """Scaffold a new step and append it to the manifest."""
    from spiegel.wizard.scaffold import create_step

    config = _get_config(ctx)
    try:
        step_dir = create_step(
            config.steps_dir, name, title,
            manifest_name=config.manifest_name,
            descriptor_name=config.descriptor_name,
        )
    except SpiegelError as e:
        _fail(e)
    WizardUI(console).print_success(f"Created step '{name}' at {step_dir}")


@main.command()
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def steps(ctx: click.Context, json_output: bool):
    """List installed steps in wizard order."""
    config = _get_config(ctx)
    repository = StepRepository.from_config(config)

    try:
        names = asyncio.run(repository.list_step_names())
    except SpiegelError as e:
        _fail(e)

    if json_output:
        click.echo(json.dumps(names, indent=2))
        return

    WizardUI(console).show_steps_table(names)


@main.command()
@click.argument("name")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def show(ctx: click.Context, name: str, json_output: bool):
    """Show a step's descriptor and where its resources resolve."""
    config = _get_config(ctx)
    repository = StepRepository.from_config(config)

    try:
        descriptor = asyncio.run(repository.get_step_descriptor(name))
    except SpiegelError as e:
        _fail(e)

    resources = [descriptor.view, *descriptor.styles, *descriptor.scripts]
    resolved = {
        resource: repository.resolve_resource_uri(descriptor.name, resource)
        for resource in resources
    }

    if json_output:
        click.echo(json.dumps({"descriptor": descriptor.to_dict(), "resolved": resolved}, indent=2))
        return

    ui = WizardUI(console)
    ui.show_summary_table(f"Step: {descriptor.name}", descriptor.to_dict())
    ui.show_checklist([
        (resource, uri is not None, uri or "not found")
        for resource, uri in resolved.items()
    ])


@main.command()
@click.option("--step", "step_name", help="Step to render (default: the first step)")
@click.option("--context", "context_file", type=click.Path(exists=True, dir_okay=False), help="YAML or JSON render context")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the page here instead of stdout")
@click.pass_context
def render(ctx: click.Context, step_name: Optional[str], context_file: Optional[str], output: Optional[str]):
    """Render a single step into a page."""
    config = _get_config(ctx)
    orchestrator = _build_orchestrator(config)

    async def _render():
        context = _load_context(context_file)
        if step_name:
            return await orchestrator.render_named(step_name, context)
        return await orchestrator.render_current(context)

    try:
        result = asyncio.run(_render())
    except SpiegelError as e:
        _fail(e)

    page_html = orchestrator.renderer.page.to_html()
    if output:
        Path(output).write_text(page_html, encoding="utf-8")
        WizardUI(console).print_success(f"Rendered '{result.step}' to {output}")
    else:
        click.echo(page_html)


@main.command()
@click.option("--context", "context_file", type=click.Path(exists=True, dir_okay=False), help="YAML or JSON render context")
@click.option("--output-dir", "-o", type=click.Path(file_okay=False), required=True, help="Directory for the rendered pages")
@click.option("--interactive", "-i", is_flag=True, help="Confirm before moving to each next step")
@click.pass_context
def walk(ctx: click.Context, context_file: Optional[str], output_dir: str, interactive: bool):
    """Render every step in order, one page per step."""
    config = _get_config(ctx)
    orchestrator = _build_orchestrator(config)
    ui = WizardUI(console)
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    async def _walk() -> List[Path]:
        context = _load_context(context_file)
        sequencer = await orchestrator.get_sequencer()
        ui.total_steps = len(sequencer)
        ui.print_header()

        written: List[Path] = []
        result = await orchestrator.render_current(context)
        while True:
            position, _ = await orchestrator.progress()
            ui.print_step_header(position, result.step)
            page_path = out / f"{position:02d}-{result.step}.html"
            page_path.write_text(orchestrator.renderer.page.to_html(), encoding="utf-8")
            written.append(page_path)
            ui.print_success(f"Wrote {page_path}")

            if interactive and not sequencer.is_at_end():
                if not await asyncio.to_thread(ui.prompt_confirm, "Continue to the next step?", True):
                    break
            try:
                result = await orchestrator.render_next(context)
            except NoMoreStepsError:
                break
        return written

    try:
        written = asyncio.run(_walk())
    except SpiegelError as e:
        _fail(e)

    console.print()
    ui.print_info(f"Rendered {len(written)} page(s) into {out}")


@main.command()
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def doctor(ctx: click.Context, json_output: bool):
    """Verify the manifest, every descriptor and every resource."""
    config = _get_config(ctx)
    repository = StepRepository.from_config(config)
    results = asyncio.run(check_installation(repository))
    all_passed = all(passed for _, passed, _ in results)

    if json_output:
        click.echo(json.dumps({
            "steps_dir": str(config.steps_dir),
            "checks": [
                {"name": name, "passed": passed, "message": message}
                for name, passed, message in results
            ],
            "all_passed": all_passed,
        }, indent=2))
    else:
        ui = WizardUI(console)
        console.print(f"[bold blue]Spiegel Doctor[/bold blue] ({config.steps_dir})")
        console.print()
        ui.show_checklist(results)
        console.print()
        if all_passed:
            console.print("[green]All checks passed![/green]")
        else:
            console.print("[yellow]Some checks failed.[/yellow]")

    sys.exit(0 if all_passed else 1)


async def check_installation(repository: StepRepository) -> List[tuple]:
    """Check the manifest and each step's descriptor and resources.

    Returns:
        List of (name, passed, message) tuples
    """
    results = []
    try:
        names = await repository.list_step_names()
    except SpiegelError as e:
        return [("Manifest", False, e.message)]
    results.append(("Manifest", True, f"{len(names)} step(s)"))

    for name in names:
        try:
            descriptor = await repository.get_step_descriptor(name)
        except SpiegelError as e:
            results.append((name, False, e.message))
            continue

        missing = [
            resource
            for resource in (descriptor.view, *descriptor.styles, *descriptor.scripts)
            if repository.resolve_resource_uri(name, resource) is None
        ]
        if missing:
            results.append((name, False, f"missing {', '.join(missing)}"))
        else:
            results.append((name, True, "descriptor and resources found"))

    return results


if __name__ == "__main__":
    main()
