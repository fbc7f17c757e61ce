"""
Spiegel Step Renderer

Renders step views into named regions of an in-memory page. Styles and
scripts attached for a region are tagged with that region, so rendering a
new view into it first drops whatever the previous view brought along.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence

import jinja2
from markupsafe import Markup

from spiegel.wizard.exceptions import ValidationError
from spiegel.wizard.logging_config import get_logger
from spiegel.wizard.validators import validate_region

if TYPE_CHECKING:
    from spiegel.wizard.repository import StepRepository


logger = get_logger("renderer")

_TEMPLATES = jinja2.Environment(autoescape=True)

LATE_LOADED_JS_TEMPLATE = _TEMPLATES.from_string(
    '<script src="{{ href }}" type="text/javascript" class="late-js-{{ type }}"></script>'
)
LATE_LOADED_CSS_TEMPLATE = _TEMPLATES.from_string(
    '<link href="{{ href }}" rel="stylesheet" class="late-css-{{ type }}">'
)

PAGE_TEMPLATE = _TEMPLATES.from_string("""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{{ title }}</title>
{% for tag in head %}{{ tag }}
{% endfor %}</head>
<body>
{% for region in regions %}<div id="{{ region.id }}"{% if not region.visible %} style="display: none"{% endif %}>
{{ region.html }}
</div>
{% endfor %}</body>
</html>
""")


def region_type(region: str) -> str:
    """Class suffix used to tag resources late-loaded for a region."""
    return region.replace("#", "")


@dataclass
class ResourceTag:
    """A stylesheet or script attached to the page head for one region."""
    kind: str  # "css" or "js"
    href: str
    region: str

    def render(self) -> str:
        template = LATE_LOADED_CSS_TEMPLATE if self.kind == "css" else LATE_LOADED_JS_TEMPLATE
        return template.render(href=self.href, type=region_type(self.region))


@dataclass
class Page:
    """In-memory document made of named regions and head resources."""
    title: str = "Spiegel"
    regions: Dict[str, str] = field(default_factory=dict)
    hidden: set = field(default_factory=set)
    head: List[ResourceTag] = field(default_factory=list)

    def region_html(self, region: str) -> Optional[str]:
        return self.regions.get(region)

    def is_visible(self, region: str) -> bool:
        return region in self.regions and region not in self.hidden

    def hide(self, region: str):
        self.hidden.add(region)

    def show(self, region: str):
        self.hidden.discard(region)

    def set_html(self, region: str, html: str):
        self.regions[region] = html

    def remove_resources(self, region: str) -> int:
        """Drop every head resource tagged for region. Returns how many."""
        before = len(self.head)
        self.head = [tag for tag in self.head if tag.region != region]
        return before - len(self.head)

    def append_resource(self, kind: str, href: str, region: str):
        self.head.append(ResourceTag(kind=kind, href=href, region=region))

    def resources_for(self, region: str, kind: Optional[str] = None) -> List[str]:
        return [
            tag.href for tag in self.head
            if tag.region == region and (kind is None or tag.kind == kind)
        ]

    def to_html(self) -> str:
        regions = [
            {"id": region_type(name), "html": Markup(html), "visible": name not in self.hidden}
            for name, html in self.regions.items()
        ]
        return PAGE_TEMPLATE.render(
            title=self.title,
            head=[Markup(tag.render()) for tag in self.head],
            regions=regions,
        )


class StepRenderer:
    """Renders views into regions of a Page."""

    def __init__(self, repository: "StepRepository", page: Optional[Page] = None):
        self.repository = repository
        self.page = page or Page()

    async def render(
        self,
        view_uri: str,
        context: Mapping[str, Any],
        region: str,
        style_uris: Sequence[str] = (),
        script_uris: Sequence[str] = (),
    ) -> str:
        """Render a view into region, replacing its content and resources.

        The template is rendered before the page is touched, so a failed
        render leaves the previous content in place.

        Returns:
            The rendered HTML placed in the region
        """
        valid, message = validate_region(region)
        if not valid:
            raise ValidationError(f"Invalid region {region!r}: {message}", field="region")

        rendered = await self.repository.render_template(view_uri, context)

        removed = self.page.remove_resources(region)
        self.page.hide(region)
        self.page.set_html(region, rendered)

        for href in style_uris:
            self.page.append_resource("css", href, region)
        for href in script_uris:
            self.page.append_resource("js", href, region)

        self.page.show(region)
        logger.debug(
            "Rendered %s into %s (%d styles, %d scripts, %d old resources removed)",
            view_uri, region, len(style_uris), len(script_uris), removed,
        )
        return rendered
