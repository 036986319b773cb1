"""
.. include:: ../README.md
"""

__all__ = [
    "manifest",
    "store",
    "resolver",
    "state_store",
    "bootstrap",
    "scheduler",
    "cluster_controller",
    "loader",
    "platform",
    "task",
    "exceptions",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
