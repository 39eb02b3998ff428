"""Template engine for scaffold plans."""
import re
from typing import Dict, Optional

from pydantic import ValidationError

from stencil.models.plan import PlanError, ScaffoldPlan

# Only {{name}} tokens whose name is declared get replaced; everything else,
# including JSX style={{ ... }} and ${SHELL_VARS}, is left verbatim.
_TOKEN = re.compile(r"\{\{([A-Za-z_][A-Za-z0-9_]*)\}\}")


class TemplateEngine:
    """Handles variable substitution for plan entries."""

    def __init__(self, variables: Optional[Dict[str, str]] = None):
        self.variables = dict(variables or {})

    def render_template(self, text: str) -> str:
        """Replace declared ``{{name}}`` tokens in *text*."""
        if not self.variables:
            return text

        def _replace(match):
            name = match.group(1)
            if name in self.variables:
                return str(self.variables[name])
            return match.group(0)

        return _TOKEN.sub(_replace, text)

    def render_plan(self, plan: ScaffoldPlan, overrides: Optional[Dict[str, str]] = None) -> ScaffoldPlan:
        """Return a copy of *plan* with variables applied to paths and contents.

        Args:
            plan: Plan to render
            overrides: Values that take precedence over the plan's own variables

        Raises:
            PlanError: If an override names an undeclared variable, or a
                rendered path is unsafe
        """
        overrides = overrides or {}
        unknown = sorted(set(overrides) - set(plan.variables))
        if unknown:
            raise PlanError(
                f"Unknown variable(s) for plan '{plan.name}': {', '.join(unknown)}"
            )

        self.variables = {**plan.variables, **overrides}
        if not self.variables:
            return plan

        try:
            return ScaffoldPlan(
                name=plan.name,
                description=plan.description,
                commit_message=self.render_template(plan.commit_message),
                directories=[self.render_template(d) for d in plan.directories],
                variables=self.variables,
                entries=[
                    {
                        'path': self.render_template(entry.path),
                        'content': self.render_template(entry.content),
                        'executable': entry.executable,
                    }
                    for entry in plan.entries
                ],
            )
        except ValidationError as e:
            raise PlanError(f"Rendered plan '{plan.name}' is invalid: {e}") from e
