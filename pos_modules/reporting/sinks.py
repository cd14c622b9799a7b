"""
Document/export sinks.

A sink receives a RenderedDocument for persistence or presentation. How the
document is displayed is outside this package.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from pos_kernel.logging_config import get_logger
from pos_modules.reporting.models import RenderedDocument

logger = get_logger("modules.reporting.sinks")


class DocumentSink(Protocol):
    def publish(self, document: RenderedDocument) -> None:
        ...


class DirectoryDocumentSink:
    """Writes each document into a directory under its own filename."""

    def __init__(self, directory: Path | str):
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def publish(self, document: RenderedDocument) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self._directory / document.filename
        path.write_bytes(document.content)
        logger.info(
            "document_written",
            extra={
                "path": str(path),
                "kind": document.kind,
                "size_bytes": len(document.content),
            },
        )
