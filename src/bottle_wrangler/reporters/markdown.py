"""Markdown reporter for resolution runs."""

from collections import Counter
from datetime import datetime
from importlib.resources import files
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, Template

from bottle_wrangler.models import ResolutionOutcome, ResolutionState
from bottle_wrangler.reporters.base import BaseReporter


class MarkdownReporter(BaseReporter):
    """Reporter that renders resolution outcomes as a Markdown document.

    Attributes:
        template: The Jinja2 template to use for rendering.
    """

    def __init__(self, template_path: Optional[Path] = None) -> None:
        """Initialize the Markdown reporter.

        Args:
            template_path: Optional path to a custom Jinja2 template.
                If not provided, uses the bundled template.
        """
        if template_path:
            env = Environment(
                loader=FileSystemLoader(template_path.parent),
                autoescape=False,
            )
            self.template = env.get_template(template_path.name)
        else:
            self.template = self._load_default_template()

    def _load_default_template(self) -> Template:
        template_content = (
            files("bottle_wrangler.templates")
            .joinpath("report.md.j2")
            .read_text(encoding="utf-8")
        )
        env = Environment(autoescape=False, trim_blocks=True, lstrip_blocks=True)
        return env.from_string(template_content)

    def render(
        self,
        outcomes: list[ResolutionOutcome],
        platform: str,
        distros: tuple[str, ...],
    ) -> str:
        counts = Counter(outcome.state for outcome in outcomes)
        return self.template.render(
            outcomes=outcomes,
            missing=[o for o in outcomes if o.state is ResolutionState.MISSING],
            unknown=[o for o in outcomes if o.state is ResolutionState.UNKNOWN],
            counts={state.value: counts.get(state, 0) for state in ResolutionState},
            platform=platform,
            distros=distros,
            generated_at=datetime.now(),
        )

    @property
    def format_name(self) -> str:
        return "markdown"
