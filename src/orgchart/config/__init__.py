"""Configuration utilities for the organization hierarchy."""

from .policies import HierarchyPolicy, Policies, load_policies
from .settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "Policies",
    "load_policies",
    "HierarchyPolicy",
]
