"""Routers package."""

from . import field_configs, projects, users

__all__ = ["field_configs", "projects", "users"]
