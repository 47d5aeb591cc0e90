"""Scoped staging of uploaded photos on disk"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from homeinspect.domain.errors import UploadError
from homeinspect.domain.models.requests import AnalysisRequest, InspectionImage, category_for

logger = logging.getLogger(__name__)


@dataclass
class StagedFile:
    """Uploaded photo written to the staging directory"""

    path: Path
    filename: Optional[str] = None
    content_type: Optional[str] = None


class UploadStaging:
    """Context manager owning staged upload files.

    Every file added is removed when the context exits, whether the block
    succeeded or raised. Removal failures are logged and never raised.
    """

    def __init__(self, upload_dir: Path):
        self.upload_dir = Path(upload_dir)
        self.files: List[StagedFile] = []

    def __enter__(self) -> "UploadStaging":
        return self

    def __exit__(self, *exc_info) -> None:
        self.cleanup()

    def add(self, data: bytes, filename: Optional[str] = None, content_type: Optional[str] = None) -> StagedFile:
        """Write one upload to the staging directory

        Raises:
            UploadError: If the file cannot be written
        """
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            path = self.upload_dir / uuid.uuid4().hex
            path.write_bytes(data)
        except OSError as e:
            raise UploadError(f"Could not store uploaded file {filename or ''}: {e}".strip()) from e
        staged = StagedFile(path=path, filename=filename, content_type=content_type)
        self.files.append(staged)
        logger.debug(f"Staged upload {filename} -> {path} ({len(data)} bytes)")
        return staged

    def build_request(self, categories: List[str]) -> AnalysisRequest:
        """Read staged files back as an analysis request

        Args:
            categories: Category labels in upload order (missing -> Unknown)

        Raises:
            UploadError: If a staged file cannot be read
        """
        images = []
        for index, staged in enumerate(self.files):
            try:
                data = staged.path.read_bytes()
            except OSError as e:
                raise UploadError(f"Could not read uploaded file {staged.filename or staged.path.name}: {e}") from e
            images.append(
                InspectionImage(
                    category=category_for(categories, index),
                    data=data,
                    content_type=staged.content_type,
                )
            )
        return AnalysisRequest(images=images)

    def cleanup(self) -> None:
        """Remove staged files (best-effort)"""
        while self.files:
            staged = self.files.pop()
            try:
                staged.path.unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.error(f"Error cleaning up file {staged.path}: {e}")
