"""Data models for Stencil."""
from stencil.models.plan import PlanError, ScaffoldPlan, TemplateEntry

__all__ = [
    'PlanError',
    'ScaffoldPlan',
    'TemplateEntry',
]
