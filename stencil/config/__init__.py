"""Plan configuration management."""
from stencil.config.loader import PlanLoader, parse_plan
from stencil.models.plan import PlanError

__all__ = ['PlanLoader', 'PlanError', 'parse_plan']
