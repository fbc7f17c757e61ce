"""
Step Scaffolding

Create a steps directory, its manifest, and skeletons for new steps.
"""

import json
from pathlib import Path
from typing import List, Optional, Tuple

import yaml

from spiegel.wizard.config import CONFIG_FILENAME, STEP_DESC_FILENAME, STEPS_DESC_FILENAME
from spiegel.wizard.exceptions import ParseError, SetupError, ValidationError
from spiegel.wizard.logging_config import get_logger
from spiegel.wizard.validators import validate_manifest_data, validate_step_name


logger = get_logger("scaffold")

VIEW_TEMPLATE = """<div id="{name}-step" class="wizard-step">
  <h1>{title}</h1>
  <p>{{{{ intro | default("Describe this step here.") }}}}</p>
</div>
"""

STYLE_TEMPLATE = """#{name}-step h1 {{
  margin-bottom: 0.5em;
}}
"""

SCRIPT_TEMPLATE = """// Behaviour for the {name} step.
"""


def _read_manifest(manifest_path: Path) -> List[str]:
    try:
        names = json.loads(manifest_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ParseError(
            f"Could not parse JSON at {manifest_path}.",
            location=str(manifest_path),
            details=str(e),
        )
    valid, message = validate_manifest_data(names)
    if not valid:
        raise ParseError(f"Malformed steps manifest: {message}", location=str(manifest_path))
    return names


def _write_manifest(manifest_path: Path, names: List[str]):
    manifest_path.write_text(json.dumps(names, indent=2) + "\n", encoding="utf-8")


def create_steps_dir(steps_dir: Path, manifest_name: str = STEPS_DESC_FILENAME) -> Tuple[bool, bool]:
    """Create the steps directory and an empty manifest.

    Returns:
        Tuple of (directory_created, manifest_created)
    """
    dir_created = False
    if not steps_dir.exists():
        steps_dir.mkdir(parents=True, exist_ok=True)
        dir_created = True

    manifest_path = steps_dir / manifest_name
    manifest_created = False
    if not manifest_path.exists():
        _write_manifest(manifest_path, [])
        manifest_created = True

    return dir_created, manifest_created


def create_step(
    steps_dir: Path,
    name: str,
    title: Optional[str] = None,
    manifest_name: str = STEPS_DESC_FILENAME,
    descriptor_name: str = STEP_DESC_FILENAME,
) -> Path:
    """Create a new step with a view, style and script, and list it last.

    Returns:
        Path of the new step directory
    """
    valid, message = validate_step_name(name)
    if not valid:
        raise ValidationError(
            message,
            field="step name",
            expected_format="letters, digits, '_' and '-'",
        )

    create_steps_dir(steps_dir, manifest_name)
    manifest_path = steps_dir / manifest_name
    names = _read_manifest(manifest_path)

    step_dir = steps_dir / name
    if step_dir.exists() or name in names:
        raise SetupError(f"Step '{name}' already exists.", step=name)

    title = title or name.replace("_", " ").replace("-", " ").title()
    step_dir.mkdir()

    descriptor = {
        "name": name,
        "view": f"{name}.html",
        "styles": [f"{name}.css"],
        "scripts": [f"{name}.js"],
    }
    (step_dir / descriptor_name).write_text(json.dumps(descriptor, indent=2) + "\n", encoding="utf-8")
    (step_dir / f"{name}.html").write_text(VIEW_TEMPLATE.format(name=name, title=title), encoding="utf-8")
    (step_dir / f"{name}.css").write_text(STYLE_TEMPLATE.format(name=name), encoding="utf-8")
    (step_dir / f"{name}.js").write_text(SCRIPT_TEMPLATE.format(name=name), encoding="utf-8")

    names.append(name)
    _write_manifest(manifest_path, names)
    logger.info("Created step '%s' in %s", name, step_dir)
    return step_dir


def generate_config_yaml(steps_dir: Path, region: str) -> str:
    """Generate spiegel.yaml contents."""
    config = {
        "steps_dir": str(steps_dir),
        "manifest": STEPS_DESC_FILENAME,
        "descriptor": STEP_DESC_FILENAME,
        "region": region,
    }
    return yaml.dump(config, default_flow_style=False, sort_keys=False)


def write_config_file(base_path: Path, steps_dir: Path, region: str) -> Optional[Path]:
    """Write spiegel.yaml into base_path unless one is already there."""
    config_path = base_path / CONFIG_FILENAME
    if config_path.exists():
        return None
    config_path.write_text(generate_config_yaml(steps_dir, region), encoding="utf-8")
    return config_path
