"""Bundled plan discovery and loading."""
import os
from pathlib import Path
from typing import List, Optional

import yaml

from stencil.config.loader import PlanLoader
from stencil.models.plan import PlanError, ScaffoldPlan

DEFAULT_PLAN = "wasm-demo"


class TemplateLoader:
    """Finds the plans shipped in ``stencil/templates/``."""

    def __init__(self, templates_dir: Optional[Path] = None):
        """Initialize template loader.

        Args:
            templates_dir: Path to templates directory. Defaults to stencil/templates/
        """
        if templates_dir is None:
            # Loader is in stencil/core/, templates are in stencil/templates/
            templates_dir = Path(__file__).parent.parent / "templates"
        self.templates_dir = Path(templates_dir)

    def list_plans(self) -> List[str]:
        """List all bundled plan names (without .yml extension)."""
        if not self.templates_dir.exists():
            return []
        return sorted(f.stem for f in self.templates_dir.glob("*.yml"))

    def plan_path(self, plan_name: str) -> Path:
        return self.templates_dir / f"{plan_name}.yml"

    def load_plan(self, plan_name: str) -> ScaffoldPlan:
        """Load a bundled plan by name.

        Raises:
            PlanError: If no bundled plan has that name or it is invalid
        """
        path = self.plan_path(plan_name)
        if not path.exists():
            available = ", ".join(self.list_plans()) or "none"
            raise PlanError(f"Plan '{plan_name}' not found. Available plans: {available}")
        return PlanLoader(str(path)).load()

    def get_plan_info(self, plan_name: str) -> str:
        """Get the plan description without validating its entries."""
        path = self.plan_path(plan_name)
        if not path.exists():
            return "No description"

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return data.get('description') or 'No description'

    def resolve(self, plan: Optional[str] = None) -> ScaffoldPlan:
        """Resolve a plan reference to a loaded plan.

        Order: an existing file path, then $STENCIL_PLAN, then a bundled
        plan name, then the default bundled plan.
        """
        reference = plan or os.environ.get("STENCIL_PLAN") or DEFAULT_PLAN

        candidate = Path(reference)
        if candidate.suffix in (".yml", ".yaml") or candidate.exists():
            if candidate.is_file():
                return PlanLoader(str(candidate)).load()
            if candidate.suffix in (".yml", ".yaml"):
                raise PlanError(f"Plan file not found: {candidate}")

        return self.load_plan(reference)
