#!/usr/bin/env python3
"""
temporal_files.py
--------------------
Temporary file management for atomic writes.

Exports are written to a tracked temporary file first and moved into place
only once complete, so a failed export never leaves a half-written file at
the destination.

Usage:
    from ficshelf.core.temporal_files import TemporalFileManager

    with TemporalFileManager() as temp_manager:
        temp_file = temp_manager.create_temp_file(suffix=".csv")
        ...  # write temp_file
        temp_manager.commit(temp_file, final_path)
    # Anything not committed is removed on exit
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import shutil
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

# --- Local imports ---
from .exceptions import TemporalFileError


class TemporalFileManager:
    """
    Tracks temporary files and removes them on exit.

    Attributes:
        base_dir: Directory the temporary files are created in
        active_files: Files created and not yet committed or removed
    """

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        """
        Args:
            base_dir: Base directory for temporary files. Uses system temp if None.
        """
        self.base_dir = Path(base_dir) if base_dir else Path(tempfile.gettempdir())
        self.active_files: List[Path] = []

    def create_temp_file(self, suffix: str = "", prefix: str = "ficshelf_") -> Path:
        """
        Create an empty temporary file and track it for cleanup.

        Raises:
            TemporalFileError: If file creation fails
        """
        try:
            temp_file_obj = tempfile.NamedTemporaryFile(
                suffix=suffix, prefix=prefix, dir=self.base_dir, delete=False
            )
            temp_file_obj.close()
        except OSError as e:
            raise TemporalFileError(f"Failed to create temporary file: {e}") from e

        temp_path = Path(temp_file_obj.name)
        self.active_files.append(temp_path)
        return temp_path

    def commit(self, temp_file: Path, destination: Path) -> Path:
        """Move a finished temporary file to its destination."""
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(temp_file), str(destination))
        if temp_file in self.active_files:
            self.active_files.remove(temp_file)
        return destination

    def cleanup(self) -> Dict[str, int]:
        """
        Remove all tracked temporary files.

        Returns:
            Dictionary with cleanup statistics
        """
        cleanup_stats = {"files_removed": 0, "errors": 0}
        for temp_file in self.active_files[:]:
            try:
                if temp_file.exists():
                    temp_file.unlink()
                    cleanup_stats["files_removed"] += 1
                self.active_files.remove(temp_file)
            except OSError:
                cleanup_stats["errors"] += 1
        return cleanup_stats

    def __enter__(self) -> "TemporalFileManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.cleanup()
