"""API route handlers."""
from . import corporate_actions, lots

__all__ = ["corporate_actions", "lots"]
