"""
Terminal system health snapshot and depth-limited file explorer.
"""

__all__ = ["system_state", "formatting", "explorer", "cli"]
__version__ = "0.1.0"
