"""
Spiegel Wizard Orchestrator

Moves the user between steps of the wizard, renders each step into the page
and carries data from one step to the next.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from spiegel.wizard.config import DEFAULT_REGION
from spiegel.wizard.exceptions import NoMoreStepsError, NotFoundError, ResourceNotFoundError
from spiegel.wizard.logging_config import get_logger
from spiegel.wizard.renderer import StepRenderer
from spiegel.wizard.repository import StepDescriptor, StepRepository
from spiegel.wizard.sequencer import StepSequencer


logger = get_logger("orchestrator")


@dataclass
class RenderResult:
    """Outcome of rendering one step or fragment."""
    step: str
    region: str
    html: str
    styles: List[str] = field(default_factory=list)
    scripts: List[str] = field(default_factory=list)


class WizardOrchestrator:
    """Orchestrates navigation and rendering of the step wizard.

    The sequencer is either injected by the caller or built on first use from
    the repository's step manifest. Construction is serialized, so concurrent
    first callers share a single manifest load.
    """

    def __init__(
        self,
        repository: StepRepository,
        renderer: Optional[StepRenderer] = None,
        sequencer: Optional[StepSequencer] = None,
        region: str = DEFAULT_REGION,
    ):
        self.repository = repository
        self.renderer = renderer or StepRenderer(repository)
        self.region = region
        self.data: Dict[str, Any] = {}
        self._sequencer = sequencer
        self._sequencer_lock = asyncio.Lock()

    async def get_sequencer(self) -> StepSequencer:
        """Get the wizard's sequencer, loading the step list on first use."""
        if self._sequencer is not None:
            return self._sequencer

        async with self._sequencer_lock:
            if self._sequencer is None:
                steps = await self.repository.list_step_names()
                self._sequencer = StepSequencer(steps, repository=self.repository)
                logger.info("Loaded %d steps: %s", len(steps), ", ".join(steps))
            return self._sequencer

    def get_data(self, key: str, default: Any = None) -> Any:
        """Get data carried between steps."""
        return self.data.get(key, default)

    def set_data(self, key: str, value: Any):
        """Set data carried between steps."""
        self.data[key] = value

    def update_data(self, data: Mapping[str, Any]):
        """Update multiple carried values."""
        self.data.update(data)

    def _merge_context(self, context: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        merged = dict(self.data)
        if context:
            merged.update(context)
        return merged

    async def render_next(self, context: Optional[Mapping[str, Any]] = None) -> RenderResult:
        """Advance to the next step and render it.

        Raises:
            NoMoreStepsError: If the current step is already the last one;
                the wizard stays where it is
        """
        sequencer = await self.get_sequencer()
        if sequencer.is_at_end():
            raise NoMoreStepsError(step=sequencer.current_step_name())

        sequencer.advance()
        return await self._render_current_step(sequencer, context)

    async def render_current(self, context: Optional[Mapping[str, Any]] = None) -> RenderResult:
        """Render the current step without moving."""
        sequencer = await self.get_sequencer()
        return await self._render_current_step(sequencer, context)

    async def render_previous(self, context: Optional[Mapping[str, Any]] = None) -> RenderResult:
        """Go back one step and render it."""
        sequencer = await self.get_sequencer()
        sequencer.retreat()
        return await self._render_current_step(sequencer, context)

    async def render_named(self, name: str, context: Optional[Mapping[str, Any]] = None) -> RenderResult:
        """Jump to the step called name and render it."""
        sequencer = await self.get_sequencer()
        sequencer.seek_by_name(name)
        return await self._render_current_step(sequencer, context)

    async def _render_current_step(
        self,
        sequencer: StepSequencer,
        context: Optional[Mapping[str, Any]],
    ) -> RenderResult:
        descriptor = await sequencer.current_step_descriptor()
        if descriptor is None:
            raise NotFoundError(
                "Could not retrieve step information.",
                details=f"no descriptor for step '{sequencer.current_step_name()}'",
            )
        return await self.render_step(descriptor, context)

    async def render_step(
        self,
        descriptor: StepDescriptor,
        context: Optional[Mapping[str, Any]] = None,
    ) -> RenderResult:
        """Render a step's view with its styles and scripts into the wizard region."""
        return await self.render_template(
            descriptor.view,
            context,
            self.region,
            descriptor.styles,
            descriptor.scripts,
            step=descriptor.name,
        )

    async def render_template(
        self,
        view: str,
        context: Optional[Mapping[str, Any]],
        region: str,
        styles: Sequence[str] = (),
        scripts: Sequence[str] = (),
        step: Optional[str] = None,
    ) -> RenderResult:
        """Render a view located outside the application bundle into region.

        Steps use this directly to fill their own sub-regions. Resource names
        without a '<step>/' prefix belong to step; when step is omitted, every
        name must carry the prefix.

        Raises:
            ResourceNotFoundError: If the view or any style or script cannot
                be resolved; nothing is rendered in that case
        """
        owner = step or view.split("/", 1)[0]

        view_uri = self._resolve(owner, view)
        style_uris = [self._resolve(owner, name) for name in styles]
        script_uris = [self._resolve(owner, name) for name in scripts]

        html = await self.renderer.render(
            view_uri,
            self._merge_context(context),
            region,
            style_uris,
            script_uris,
        )
        logger.info("Rendered step '%s' into %s", owner, region)
        return RenderResult(
            step=owner,
            region=region,
            html=html,
            styles=style_uris,
            scripts=script_uris,
        )

    def _resolve(self, step: str, resource: str) -> str:
        uri = self.repository.resolve_resource_uri(step, resource)
        if uri is None:
            raise ResourceNotFoundError(
                f"Could not find {resource}.",
                resource=resource,
                step=step,
            )
        return uri

    async def progress(self) -> Tuple[int, int]:
        """Current 1-based position and total number of steps."""
        sequencer = await self.get_sequencer()
        return sequencer.position(), len(sequencer)
