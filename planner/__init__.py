"""
Project Planner: per-user projects and todos over a flat key-value store.
"""

__version__ = "1.0.0"
