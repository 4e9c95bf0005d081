"""Project Migrator.

Orchestrates a whole-project run: walk → scan components → transform → write.
Component files become ``.tsx`` files, component templates are inlined and
not copied, every other file is copied unchanged.
"""

import logging
import os
import shutil
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set

from ..ast_parser import parse_typescript
from ..components import ComponentRecord, ProjectInfo, find_components
from ..constants import COMPONENT_TEMPLATE_SUFFIX, SKIP_DIRECTORIES
from ..errors import ConfigurationError, Ng2ReactError
from ..policy import PolicyRegistry, load_policy
from ..transform import transform_component_file

logger = logging.getLogger(__name__)


@dataclass
class MigrationResult:
    """Summary of a migration run."""

    files_transformed: int = 0
    files_copied: int = 0
    files_skipped: int = 0
    components_found: int = 0
    errors: List[str] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.errors


def should_skip_directory(dir_name: str) -> bool:
    """Check if a directory should be skipped during file walking."""
    return dir_name in SKIP_DIRECTORIES or dir_name.startswith(".")


class ProjectMigrator:
    """Migrates every component of a source tree into a target tree."""

    def __init__(
        self,
        src_root: str,
        target_root: str,
        policy: Optional[PolicyRegistry] = None,
        dry_run: bool = False,
        template_loader: Optional[Callable[[str], str]] = None,
    ):
        self.src_root = os.path.abspath(src_root)
        self.target_root = os.path.abspath(target_root)
        self.policy = policy if policy is not None else load_policy()
        self.dry_run = dry_run
        self.template_loader = template_loader
        # .ts sources read during the scan, reused by the transform pass
        self._sources: Dict[str, str] = {}
        self._failed_scans: Set[str] = set()

    def migrate(self) -> MigrationResult:
        """Run the migration.

        Returns:
            MigrationResult with counts and per-file errors.

        Raises:
            ConfigurationError: If the source root is not a directory.
        """
        if not os.path.isdir(self.src_root):
            raise ConfigurationError(f"Source directory not found: {self.src_root}")

        start = time.time()
        result = MigrationResult()
        self._sources.clear()
        self._failed_scans.clear()
        files = self._collect_files(self.src_root)
        logger.info(f"Found {len(files)} files under {self.src_root}")

        component_map, component_files = self._scan_components(files, result)
        project_info = ProjectInfo(
            src_root=self.src_root,
            component_map=component_map,
            policy=self.policy,
            template_loader=self.template_loader,
        )

        for file_path in files:
            self._process_file(file_path, project_info, component_files, result)

        result.elapsed_seconds = time.time() - start
        self._log_result(result)
        return result

    # ── Walking ───────────────────────────────────────────────────

    def _collect_files(self, root_dir: str) -> List[str]:
        """Walk the source tree, skipping tool directories and the target."""
        files = []
        for dirpath, dirnames, filenames in os.walk(root_dir):
            dirnames[:] = sorted(
                d for d in dirnames
                if not should_skip_directory(d)
                and os.path.join(dirpath, d) != self.target_root
            )
            for fname in sorted(filenames):
                files.append(os.path.join(dirpath, fname))
        return files

    # ── Scanning ──────────────────────────────────────────────────

    def _scan_components(self, files: List[str], result: MigrationResult):
        """First pass: build the selector registry from every ``.ts`` file."""
        component_map: Dict[str, ComponentRecord] = {}
        component_files: Dict[str, List[ComponentRecord]] = {}

        for file_path in files:
            if not file_path.endswith(".ts") or file_path.endswith(".d.ts"):
                continue
            rel = self._relative(file_path)
            try:
                with open(file_path, "r", encoding="utf-8") as f:
                    text = f.read()
                records = find_components(parse_typescript(text, file_path))
            except (Ng2ReactError, OSError, UnicodeDecodeError) as e:
                logger.error(f"Error scanning {rel}: {e}")
                result.errors.append(f"{rel}: {e}")
                self._failed_scans.add(file_path)
                continue

            self._sources[file_path] = text
            if not records:
                continue
            component_files[file_path] = records
            for record in records:
                existing = component_map.get(record.selector)
                if existing is not None:
                    logger.warning(
                        f"Selector '{record.selector}' of {record.name} in {rel} "
                        f"already used by {existing.name}; the later one wins"
                    )
                component_map[record.selector] = record
            result.components_found += len(records)

        logger.info(
            f"Scan complete: {result.components_found} components in {len(component_files)} files"
        )
        return component_map, component_files

    # ── Per file ──────────────────────────────────────────────────

    def _process_file(
        self,
        file_path: str,
        project_info: ProjectInfo,
        component_files: Dict[str, List[ComponentRecord]],
        result: MigrationResult,
    ) -> None:
        rel = self._relative(file_path)
        try:
            if file_path in component_files:
                self._transform_file(file_path, rel, project_info)
                result.files_transformed += 1
            elif file_path.endswith(COMPONENT_TEMPLATE_SUFFIX):
                logger.debug(f"Skipping component template {rel}")
                result.files_skipped += 1
            elif file_path in self._failed_scans:
                # already recorded
                result.files_skipped += 1
            else:
                self._copy_file(file_path, rel)
                result.files_copied += 1
        except (Ng2ReactError, OSError) as e:
            logger.error(f"Error processing {rel}: {e}")
            result.errors.append(f"{rel}: {e}")

    def _transform_file(self, file_path: str, rel: str, project_info: ProjectInfo) -> None:
        text = self._sources[file_path]
        tsx = transform_component_file(text, file_path, project_info)
        target = os.path.join(self.target_root, os.path.splitext(rel)[0] + ".tsx")
        logger.debug(f"Transformed {rel} -> {self._relative_target(target)}")
        if self.dry_run:
            return
        os.makedirs(os.path.dirname(target), exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            f.write(tsx)

    def _copy_file(self, file_path: str, rel: str) -> None:
        target = os.path.join(self.target_root, rel)
        logger.debug(f"Copying {rel}")
        if self.dry_run:
            return
        os.makedirs(os.path.dirname(target), exist_ok=True)
        shutil.copy2(file_path, target)

    def _relative(self, file_path: str) -> str:
        return os.path.relpath(file_path, self.src_root).replace("\\", "/")

    def _relative_target(self, file_path: str) -> str:
        return os.path.relpath(file_path, self.target_root).replace("\\", "/")

    def _log_result(self, result: MigrationResult):
        """Log migration result summary."""
        mode = " (dry run)" if self.dry_run else ""
        logger.info(
            f"Migration complete{mode}: {result.components_found} components, "
            f"{result.files_transformed} transformed, {result.files_copied} copied, "
            f"{result.files_skipped} skipped, {len(result.errors)} errors "
            f"in {result.elapsed_seconds:.1f}s"
        )
