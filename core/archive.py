import io
import os
import tempfile
import zipfile
from pathlib import Path
from typing import Iterable, Mapping, Optional, Tuple, Union

from utils.logging import log_message

ResultSource = Union[Mapping[int, Optional[bytes]], Iterable[Tuple[int, Optional[bytes]]]]

DEFAULT_ENTRY_TEMPLATE = "bubble_{number}.png"


def archive_entry_name(index: int, entry_template: str = DEFAULT_ENTRY_TEMPLATE) -> str:
    """Names an archive entry by 1-based paragraph position."""
    return entry_template.format(number=index + 1, index=index)


def _iter_resolved(results: ResultSource):
    pairs = results.items() if isinstance(results, Mapping) else results
    for index, png_bytes in sorted(pairs, key=lambda pair: pair[0]):
        if png_bytes:
            yield index, png_bytes


def build_archive(
    results: ResultSource,
    entry_template: str = DEFAULT_ENTRY_TEMPLATE,
    verbose: bool = False,
) -> bytes:
    """
    Packages resolved bubbles into an in-memory zip archive.

    Args:
        results: Index to PNG bytes, as a mapping, BubbleResults or (index, bytes) pairs.
            Indices without bytes are skipped.
        entry_template (str): Entry name pattern; ``{number}`` is index + 1
        verbose (bool): Whether to print detailed logs

    Returns:
        bytes: Zip archive contents
    """
    buffer = io.BytesIO()
    written = 0
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zip_ref:
        for index, png_bytes in _iter_resolved(results):
            zip_ref.writestr(archive_entry_name(index, entry_template), png_bytes)
            written += 1

    log_message(f"Packed {written} bubbles into archive", verbose=verbose)
    return buffer.getvalue()


def write_archive(
    results: ResultSource,
    output_path: Union[str, Path],
    entry_template: str = DEFAULT_ENTRY_TEMPLATE,
    verbose: bool = False,
) -> Path:
    """
    Writes the zip archive of resolved bubbles to ``output_path``.

    An existing archive is replaced in one step, so readers never see a
    partially written file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    archive_bytes = build_archive(results, entry_template, verbose=verbose)

    fd, temp_path = tempfile.mkstemp(dir=output_path.parent, suffix=".part")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(archive_bytes)
        os.replace(temp_path, output_path)
    except OSError:
        if os.path.exists(temp_path):
            os.remove(temp_path)
        raise

    log_message(f"Saved archive to {output_path}", verbose=verbose)
    return output_path
