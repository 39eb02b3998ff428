"""YAML plan loader."""
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from stencil.core.logger import get_logger
from stencil.models.plan import PlanError, ScaffoldPlan

logger = get_logger(__name__)

# Top-level keys accepted in a plan document
PLAN_KEYS = {'name', 'description', 'commit_message', 'directories', 'variables', 'files'}


class PlanLoader:
    """Loads scaffold plans from YAML files.

    A plan document looks like::

        name: my-plan
        commit_message: "Initial commit"
        directories:
          - .github/workflows
        files:
          README.md: |
            # Hello
          scripts/build.sh:
            executable: true
            content: |
              #!/bin/bash

    ``files`` may also be a list of ``{path, content, executable}`` mappings.
    """

    def __init__(self, plan_path: str):
        self.plan_path = Path(plan_path)
        self.raw_plan: Optional[Dict[str, Any]] = None

    def load(self) -> ScaffoldPlan:
        """Load and validate the plan file."""
        if not self.plan_path.exists():
            raise PlanError(f"Plan file not found: {self.plan_path}")

        try:
            with open(self.plan_path, encoding="utf-8") as f:
                self.raw_plan = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise PlanError(f"Plan file {self.plan_path} is not valid YAML: {e}") from e

        if not self.raw_plan:
            raise PlanError(f"Plan file is empty: {self.plan_path}")

        plan = parse_plan(self.raw_plan, default_name=self.plan_path.stem)
        logger.debug(f"Loaded plan '{plan.name}' with {len(plan.entries)} entries from {self.plan_path}")
        return plan


def parse_plan(data: Any, default_name: str = "custom") -> ScaffoldPlan:
    """Turn a decoded plan document into a validated ``ScaffoldPlan``."""
    if not isinstance(data, dict):
        raise PlanError("Plan document must be a mapping at the top level")

    unknown = set(data) - PLAN_KEYS
    if unknown:
        raise PlanError(f"Unknown plan keys: {', '.join(sorted(unknown))}")

    fields: Dict[str, Any] = {
        key: data[key]
        for key in ('description', 'commit_message', 'directories')
        if data.get(key) is not None
    }
    fields['name'] = data.get('name') or default_name
    fields['entries'] = _parse_files(data.get('files') or [])

    variables = data.get('variables') or {}
    if not isinstance(variables, dict):
        raise PlanError("'variables' must be a mapping of name to value")
    fields['variables'] = {str(k): str(v) for k, v in variables.items()}

    try:
        return ScaffoldPlan(**fields)
    except ValidationError as e:
        raise PlanError(_format_validation_error(e)) from e


def _parse_files(files: Any) -> List[Dict[str, Any]]:
    """Normalize the ``files`` section into a list of entry dicts."""
    if isinstance(files, dict):
        entries = []
        for path, spec in files.items():
            if isinstance(spec, dict):
                entries.append({'path': path, **spec})
            elif spec is None:
                entries.append({'path': path, 'content': ""})
            elif isinstance(spec, str):
                entries.append({'path': path, 'content': spec})
            else:
                raise PlanError(f"File '{path}' must map to text or to a mapping with 'content'")
        return entries

    if isinstance(files, list):
        for item in files:
            if not isinstance(item, dict) or 'path' not in item:
                raise PlanError("Each item in 'files' must be a mapping with a 'path' key")
        return files

    raise PlanError("'files' must be a mapping or a list")


def _format_validation_error(error: ValidationError) -> str:
    """Flatten pydantic errors into one readable line per problem."""
    lines = []
    for err in error.errors():
        location = ".".join(str(part) for part in err['loc'])
        message = err['msg'].removeprefix("Value error, ")
        lines.append(f"{location}: {message}" if location else message)
    return "Invalid plan: " + "; ".join(lines)
