"""
app/repositories/upload_file_storage.py

Local filesystem storage for accepted upload rows.

Output is written in two phases so a failed upload never disturbs an
earlier file with the same name:

    stage_rows -> rows written to `<target>.tmp`
    promote    -> an existing target moves to `<target>.bak`, the temp
                  file takes its place
    finish     -> the backup is dropped (upload committed)
    discard    -> the temp file is dropped and any backup restored
"""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from app.domain.uploads import AcceptedRow, UploadType, output_directory_for

logger = logging.getLogger(__name__)


class FileStorageError(Exception):
    """Raised when writing, moving or restoring an output file fails."""


def _sanitize_file_name(file_name: str) -> str:
    safe_name = Path(file_name.replace("\\", "/")).name.strip()
    if not safe_name or safe_name in {".", ".."}:
        raise FileStorageError("Invalid file name.")
    return safe_name


@dataclass
class StagedOutput:
    target: Path
    temp_path: Path
    backup_path: Path
    promoted: bool = False
    replaced_existing: bool = False


class UploadFileStorage:
    """
    Writes accepted rows to `<root>/<type directory>/<file name>`.

    Output has no header line and every field is quoted. A file with the
    same name is replaced once the upload is promoted.
    """

    def __init__(self, root_dir: str | Path = "public") -> None:
        self._root_dir = Path(root_dir)

    @property
    def root_dir(self) -> Path:
        return self._root_dir

    def path_for(self, upload_type: UploadType, file_name: str) -> Path:
        return self._root_dir / output_directory_for(upload_type) / _sanitize_file_name(file_name)

    def stage_rows(
        self,
        upload_type: UploadType,
        file_name: str,
        rows: Iterable[AcceptedRow],
    ) -> StagedOutput:
        target = self.path_for(upload_type, file_name)
        staged = StagedOutput(
            target=target,
            temp_path=target.with_suffix(f"{target.suffix}.tmp"),
            backup_path=target.with_suffix(f"{target.suffix}.bak"),
        )
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with staged.temp_path.open("w", encoding="utf-8", newline="") as handle:
                writer = csv.writer(handle, quoting=csv.QUOTE_ALL)
                for row in rows:
                    writer.writerow(row.to_csv_record())
        except OSError as exc:
            self._unlink_quietly(staged.temp_path)
            raise FileStorageError(f"Failed to write upload output to {target}.") from exc
        return staged

    def promote(self, staged: StagedOutput) -> Path:
        try:
            if staged.target.exists():
                staged.target.replace(staged.backup_path)
                staged.replaced_existing = True
            staged.temp_path.replace(staged.target)
        except OSError as exc:
            raise FileStorageError(f"Failed to move upload output into {staged.target}.") from exc
        staged.promoted = True
        logger.info("Upload output written path=%s", staged.target)
        return staged.target

    def finish(self, staged: StagedOutput) -> None:
        if staged.replaced_existing:
            self._unlink_quietly(staged.backup_path)

    def discard(self, staged: StagedOutput) -> None:
        """
        Undo a staged or promoted output, restoring any file it replaced.
        """

        try:
            if staged.temp_path.exists():
                staged.temp_path.unlink()
            if staged.replaced_existing:
                staged.backup_path.replace(staged.target)
            elif staged.promoted and staged.target.exists():
                staged.target.unlink()
        except OSError as exc:
            raise FileStorageError(f"Failed to restore upload output {staged.target}.") from exc
        logger.info("Upload output discarded path=%s restored=%s", staged.target, staged.replaced_existing)

    @staticmethod
    def _unlink_quietly(path: Path) -> None:
        if not path.exists():
            return
        try:
            path.unlink()
        except OSError:
            logger.warning("Could not remove upload file path=%s", path)
