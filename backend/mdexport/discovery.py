from __future__ import annotations

import os
import shutil
import tempfile
import threading
import zipfile
from pathlib import Path
from typing import Iterable

from .config import OUTPUT_FILENAME
from .errors import InvalidInputError, IOFailureError, NotFoundError
from .logging_utils import get_logger
from .pdf_export import render_markdown_pdf
from .schemas import ConvertResult, ProcessedInput

log = get_logger(__name__)

MARKDOWN_EXTENSIONS = {".md", ".markdown"}
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp"}
ARCHIVE_EXTENSIONS = {".zip"}


class ScratchArea:
    """Temporary directories holding extracted archives for the conversion
    in flight. Callers hold ``lock`` while replacing its contents."""

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self._dirs: list[tempfile.TemporaryDirectory] = []

    def __len__(self) -> int:
        return len(self._dirs)

    def add(self, temp_dir: tempfile.TemporaryDirectory) -> None:
        self._dirs.append(temp_dir)

    def clear(self) -> None:
        dirs, self._dirs = self._dirs, []
        for temp_dir in dirs:
            temp_dir.cleanup()


def is_markdown(path: Path) -> bool:
    return path.suffix.lower() in MARKDOWN_EXTENSIONS


def is_image(path: Path) -> bool:
    return path.suffix.lower() in IMAGE_EXTENSIONS


def is_archive(path: Path) -> bool:
    return path.is_file() and path.suffix.lower() in ARCHIVE_EXTENSIONS


def _safe_resolve(base: Path, rel: str) -> Path | None:
    root = base.resolve()
    candidate = (root / rel).resolve()
    if candidate != root and root not in candidate.parents:
        return None
    return candidate


def extract_zip(path: Path) -> tempfile.TemporaryDirectory:
    temp_dir = tempfile.TemporaryDirectory(prefix="mdexport_")
    root = Path(temp_dir.name)
    try:
        with zipfile.ZipFile(path) as archive:
            for info in archive.infolist():
                out_path = _safe_resolve(root, info.filename)
                if out_path is None:
                    raise IOFailureError(f"Unsafe entry in archive {path}: {info.filename}")
                if info.is_dir():
                    out_path.mkdir(parents=True, exist_ok=True)
                    continue
                out_path.parent.mkdir(parents=True, exist_ok=True)
                with archive.open(info) as src, out_path.open("wb") as dst:
                    shutil.copyfileobj(src, dst)
    except IOFailureError:
        temp_dir.cleanup()
        raise
    except (zipfile.BadZipFile, OSError) as e:
        temp_dir.cleanup()
        raise IOFailureError(f"Failed to extract {path}: {e}") from e
    log.debug("Extracted %s to %s", path, root)
    return temp_dir


def collect_assets(roots: Iterable[Path]) -> tuple[list[str], list[str]]:
    markdown_files: list[str] = []
    image_files: list[str] = []
    for root in roots:
        if root.is_file():
            if is_markdown(root):
                markdown_files.append(str(root))
            continue
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames.sort()
            for name in sorted(filenames):
                path = Path(dirpath) / name
                if not path.is_file():
                    continue
                if is_markdown(path):
                    markdown_files.append(str(path))
                elif is_image(path):
                    image_files.append(str(path))
    return markdown_files, image_files


def common_root(paths: list[Path]) -> Path | None:
    if not paths:
        return None
    first = paths[0].parts
    common_len = len(first)
    for path in paths[1:]:
        parts = path.parts
        common_len = min(common_len, len(parts))
        for i in range(common_len):
            if parts[i] != first[i]:
                common_len = i
                break
    if common_len == 0:
        return None
    return Path(*first[:common_len])


def _is_filesystem_root(path: Path) -> bool:
    return path.parent == path


def process_input(input_paths: list[str], scratch: ScratchArea) -> ProcessedInput:
    if not input_paths:
        raise InvalidInputError("No input paths provided")

    with scratch.lock:
        scratch.clear()
        scan_roots: list[Path] = []
        output_roots: list[Path] = []

        for input_path in input_paths:
            path = Path(input_path).expanduser().resolve()
            if not path.exists():
                raise NotFoundError(f"Input path does not exist: {path}")

            if is_archive(path):
                extracted = extract_zip(path)
                scratch.add(extracted)
                scan_roots.append(Path(extracted.name))
                output_roots.append(path.parent)
            elif path.is_file():
                scan_roots.append(path)
                output_roots.append(path.parent)
            else:
                scan_roots.append(path)
                output_roots.append(path)

        markdown_files, image_files = collect_assets(scan_roots)

    root = common_root(output_roots)
    if root is None or _is_filesystem_root(root):
        root = output_roots[0]

    log.info(
        "Discovered %d markdown file(s), %d image(s); output root %s",
        len(markdown_files),
        len(image_files),
        root,
    )
    return ProcessedInput(markdown_files=markdown_files, image_files=image_files, root=str(root))


def convert_to_pdf(
    processed: ProcessedInput,
    scratch: ScratchArea,
    *,
    output_name: str = OUTPUT_FILENAME,
) -> ConvertResult:
    if not processed.markdown_files:
        raise InvalidInputError("No markdown files found")

    output_path = Path(processed.root) / output_name
    render_markdown_pdf(processed.markdown_files, output_path)

    with scratch.lock:
        scratch.clear()

    return ConvertResult(output_path=str(output_path))
