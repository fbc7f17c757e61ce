"""Shared fixtures for Spiegel tests."""

import json
from pathlib import Path

import pytest


STEP_NAMES = ["step1", "step2", "step3"]


def write_step(steps_dir: Path, name: str, view_text: str = None, styles=True, scripts=True):
    """Write a complete step directory with descriptor, view, style and script."""
    step_dir = steps_dir / name
    step_dir.mkdir(parents=True, exist_ok=True)
    descriptor = {
        "name": name,
        "view": f"{name}.html",
        "styles": [f"{name}.css"] if styles else [],
        "scripts": [f"{name}.js"] if scripts else [],
    }
    (step_dir / "step.json").write_text(json.dumps(descriptor))
    (step_dir / f"{name}.html").write_text(
        view_text or f"<h1>{name}</h1><p>{{{{ greeting }}}}</p>"
    )
    if styles:
        (step_dir / f"{name}.css").write_text("h1 { color: blue; }")
    if scripts:
        (step_dir / f"{name}.js").write_text("console.log('hi');")
    return step_dir


@pytest.fixture
def steps_dir(tmp_path):
    """A steps directory with three installed steps."""
    root = tmp_path / "steps"
    root.mkdir()
    (root / "steps.json").write_text(json.dumps(STEP_NAMES))
    for name in STEP_NAMES:
        write_step(root, name)
    return root


@pytest.fixture
def repository(steps_dir):
    from spiegel.wizard.repository import StepRepository

    return StepRepository(steps_dir)
