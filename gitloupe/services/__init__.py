"""
Services — External collaborators

- Git: optional git executable for packed objects and cross-checks
"""

from .git import GitCapability, GitIntegration, parse_ls_tree

__all__ = ["GitCapability", "GitIntegration", "parse_ls_tree"]
