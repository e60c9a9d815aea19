"""
Fingerprint many files on a thread pool.

Every file gets its own canvases and buffers, so workers share nothing but the
backend configuration. Recoverable failures are recorded per file; integrity
violations (BufferSizeMismatch) abort the whole run.
"""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Sequence

from image_fingerprint.errors import FingerprintError
from image_fingerprint.models.buffers import Fingerprint
from image_fingerprint.services.canvas import PillowBackend
from image_fingerprint.services.fingerprint_service import (
    AHASH,
    DHASH,
    FingerprintSet,
    fingerprint_file,
    validate_algorithms,
)
from image_fingerprint.utils.imaging import save_jpeg

LOGGER = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".gif", ".tif", ".tiff", ".webp"}


@dataclass
class FingerprintResult:
    path: Path
    ahash: Fingerprint | None = None
    dhash: Fingerprint | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchProgress:
    processed: int
    total: int
    failed: int
    last_path: Path | None = None
    errors: list[str] = field(default_factory=list)


ProgressCallback = Callable[[BatchProgress], None]


def iter_image_files(paths: Iterable[str | Path], recursive: bool = True) -> Iterable[Path]:
    """Yield image files: explicit files as given, folders expanded by extension."""
    for entry in paths:
        path = Path(entry)
        if path.is_dir():
            iterator = path.rglob("*") if recursive else path.glob("*")
            for candidate in sorted(iterator):
                if candidate.is_file() and candidate.suffix.lower() in SUPPORTED_EXTENSIONS:
                    yield candidate
        else:
            yield path


class BatchFingerprinter:
    """Compute fingerprints for a list of files."""

    def __init__(
        self,
        backend: PillowBackend | None = None,
        max_workers: int | None = None,
        algorithms: Iterable[str] = (AHASH, DHASH),
        dump_dir: Path | None = None,
    ) -> None:
        self.backend = backend or PillowBackend()
        self.max_workers = max(1, max_workers or min(8, os.cpu_count() or 4))
        self.algorithms = validate_algorithms(algorithms)
        self.dump_dir = dump_dir

    def run(
        self,
        paths: Sequence[Path],
        progress_cb: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> list[FingerprintResult]:
        total = len(paths)
        results: list[FingerprintResult] = []
        errors: list[str] = []
        LOGGER.info(
            "Fingerprinting %d files with %d workers (%s, filter=%s)",
            total,
            self.max_workers,
            ",".join(self.algorithms),
            self.backend.filter_name,
        )
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            for result in executor.map(self._process_single_path, paths):
                results.append(result)
                if result.error:
                    errors.append(f"{result.path}: {result.error}")
                if progress_cb is not None:
                    progress_cb(
                        BatchProgress(
                            processed=len(results),
                            total=total,
                            failed=len(errors),
                            last_path=result.path,
                            errors=errors.copy(),
                        )
                    )
                if cancel_event is not None and cancel_event.is_set():
                    LOGGER.info("Fingerprinting cancelled after %d of %d files", len(results), total)
                    executor.shutdown(wait=True, cancel_futures=True)
                    break
        LOGGER.info("Fingerprinting finished: processed=%d failed=%d", len(results), len(errors))
        return results

    def _process_single_path(self, path: Path) -> FingerprintResult:
        try:
            fingerprints = fingerprint_file(path, algorithms=self.algorithms, backend=self.backend)
            if self.dump_dir is not None:
                self._dump_thumbnails(path, fingerprints)
        except FingerprintError as exc:
            LOGGER.warning("Failed to fingerprint %s: %s", path, exc)
            return FingerprintResult(path=path, error=str(exc))
        except Exception as exc:
            LOGGER.exception("Failed to fingerprint %s", path)
            return FingerprintResult(path=path, error=str(exc))
        return FingerprintResult(path=path, ahash=fingerprints.ahash, dhash=fingerprints.dhash)

    def _dump_thumbnails(self, path: Path, fingerprints: FingerprintSet) -> None:
        for name, thumbnail in fingerprints.thumbnails.items():
            save_jpeg(thumbnail, self.dump_dir / f"{path.stem}.{name}.jpg")
