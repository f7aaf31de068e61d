"""Core business logic layer.

Subpackages:
- nutrition: target splitting and tolerance checks
- planning: anchors, budget, the generation pipeline and the plan lifecycle
- shopping: aggregating ingredient lines into a shopping list
- reporting: nutrition summaries of a stored plan
"""
__all__ = ["nutrition", "planning", "shopping", "reporting"]
