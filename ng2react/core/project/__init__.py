"""Whole-project migration."""

from .migrator import MigrationResult, ProjectMigrator, should_skip_directory

__all__ = ["MigrationResult", "ProjectMigrator", "should_skip_directory"]
