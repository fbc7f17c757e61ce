"""
Spiegel Step Repository

Read-only access to steps installed outside the application bundle: the
ordered step manifest, per-step descriptors, resource locations and view
templates. File reads run in worker threads so callers never block the event
loop.
"""

import asyncio
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import jinja2

from spiegel.wizard.config import STEP_DESC_FILENAME, STEPS_DESC_FILENAME, WizardConfig
from spiegel.wizard.exceptions import NotFoundError, ParseError
from spiegel.wizard.logging_config import get_logger
from spiegel.wizard.validators import (
    validate_descriptor_data,
    validate_manifest_data,
    validate_resource_name,
    validate_step_name,
)


logger = get_logger("repository")


@dataclass(frozen=True)
class StepDescriptor:
    """Renderable resources of one step, as declared in its step.json."""
    name: str
    view: str
    styles: Tuple[str, ...] = field(default_factory=tuple)
    scripts: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Any, location: Optional[str] = None) -> "StepDescriptor":
        """Build a descriptor, rejecting malformed payloads with ParseError."""
        valid, message = validate_descriptor_data(data)
        if not valid:
            raise ParseError(
                f"Malformed step descriptor: {message}",
                location=location,
            )
        return cls(
            name=data["name"],
            view=data["view"],
            styles=tuple(data.get("styles", [])),
            scripts=tuple(data.get("scripts", [])),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "view": self.view,
            "styles": list(self.styles),
            "scripts": list(self.scripts),
        }


class StepRepository:
    """File-backed store of installed steps."""

    def __init__(
        self,
        steps_dir: Union[str, Path],
        manifest_name: str = STEPS_DESC_FILENAME,
        descriptor_name: str = STEP_DESC_FILENAME,
    ):
        self.steps_dir = Path(steps_dir).resolve()
        self.manifest_name = manifest_name
        self.descriptor_name = descriptor_name
        self._env = jinja2.Environment(
            autoescape=jinja2.select_autoescape(
                enabled_extensions=("html", "htm", "xml"),
                default_for_string=True,
            ),
            undefined=jinja2.Undefined,
        )

    @classmethod
    def from_config(cls, config: WizardConfig) -> "StepRepository":
        return cls(
            config.steps_dir,
            manifest_name=config.manifest_name,
            descriptor_name=config.descriptor_name,
        )

    @property
    def manifest_path(self) -> Path:
        return self.steps_dir / self.manifest_name

    def descriptor_path(self, name: str) -> Path:
        return self.steps_dir / name / self.descriptor_name

    async def read_json(self, location: Union[str, Path]) -> Any:
        """Read and decode a JSON file.

        Raises:
            NotFoundError: If the file does not exist
            ParseError: If the file is not valid UTF-8 JSON
        """
        path = Path(location)
        contents = await asyncio.to_thread(self._read_text, path, "JSON")
        try:
            return json.loads(contents)
        except json.JSONDecodeError as e:
            raise ParseError(
                f"Could not parse JSON at {path}.",
                location=str(path),
                details=str(e),
            )

    async def list_step_names(self) -> List[str]:
        """Get the ordered names of the installed steps."""
        data = await self.read_json(self.manifest_path)
        valid, message = validate_manifest_data(data)
        if not valid:
            raise ParseError(
                f"Malformed steps manifest: {message}",
                location=str(self.manifest_path),
            )
        logger.debug("Loaded %d step names from %s", len(data), self.manifest_path)
        return list(data)

    async def get_step_descriptor(self, name: str) -> StepDescriptor:
        """Get the descriptor for a single installed step.

        Does not query any remote repositories.
        """
        valid, message = validate_step_name(name)
        if not valid:
            raise NotFoundError(f"No step named {name!r}: {message}")

        path = self.descriptor_path(name)
        data = await self.read_json(path)
        descriptor = StepDescriptor.from_dict(data, location=str(path))
        if descriptor.name != name:
            raise ParseError(
                f"Descriptor for step '{name}' names itself '{descriptor.name}'.",
                location=str(path),
                remediation=f"Set \"name\" to \"{name}\" in {path}",
            )
        logger.debug("Loaded descriptor for step '%s'", name)
        return descriptor

    def resolve_resource_uri(self, step_name: str, resource_name: str) -> Optional[str]:
        """Get the full location of a resource not bundled with the application.

        A resource name of the form '<step>/<file>' names its step explicitly;
        a bare file name belongs to step_name.

        Returns:
            The absolute path as a string, or None if it could not be resolved
        """
        valid, _ = validate_resource_name(resource_name)
        if not valid:
            return None

        pieces = resource_name.split("/")
        if len(pieces) == 2:
            step_name, file_name = pieces
        else:
            file_name = pieces[0]
            valid, _ = validate_step_name(step_name)
            if not valid:
                return None

        path = (self.steps_dir / step_name / file_name).resolve()
        if self.steps_dir not in path.parents:
            return None
        if not path.is_file():
            logger.debug("Resource %s of step '%s' does not exist", file_name, step_name)
            return None

        return str(path)

    async def render_template(self, location: Union[str, Path], context: Mapping[str, Any]) -> str:
        """Render a view template with the given context.

        Raises:
            NotFoundError: If the template does not exist
            ParseError: If the template cannot be parsed or fails to render
        """
        path = Path(location)
        source = await asyncio.to_thread(self._read_text, path, "Template")
        remediation = f"Fix the template in {path}"
        try:
            template = self._env.from_string(source)
        except jinja2.TemplateSyntaxError as e:
            raise ParseError(
                f"Could not parse template {path}.",
                location=str(path),
                remediation=remediation,
                details=f"line {e.lineno}: {e.message}",
            )
        try:
            return await asyncio.to_thread(template.render, dict(context))
        except jinja2.TemplateError as e:
            raise ParseError(
                f"Could not render template {path}.",
                location=str(path),
                remediation=f"{remediation} or pass the values it expects",
                details=str(e),
            )

    def _read_text(self, path: Path, kind: str) -> str:
        if not path.is_file():
            raise NotFoundError(
                f"{kind} {path} could not be found.",
                location=str(path),
            )
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(
                f"{kind} {path} is not valid UTF-8.",
                location=str(path),
                remediation=f"Save {path} with UTF-8 encoding",
                details=str(e),
            )
