"""Output writing: atomic file writes, static asset copies, and output cleanup"""

import os
import shutil
from pathlib import Path, PurePosixPath

from mdsite.errors import ConfigError


def write_text(output_dir: Path, rel: PurePosixPath, text: str) -> bool:
    """Write text to output_dir/rel via a temp file and rename.

    Returns False (and leaves the file alone) when the bytes are unchanged.
    """
    return write_bytes(output_dir, rel, text.encode('utf-8'))


def write_bytes(output_dir: Path, rel: PurePosixPath, data: bytes) -> bool:
    dest = output_dir / rel
    if dest.is_file() and dest.read_bytes() == data:
        return False
    dest.parent.mkdir(parents=True, exist_ok=True)
    tmp = dest.with_name(f".{dest.name}.tmp")
    try:
        with open(tmp, 'wb') as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp, dest)
    finally:
        if tmp.exists():
            tmp.unlink()
    return True


def copy_asset(src: Path, output_dir: Path, rel: PurePosixPath) -> bool:
    """Copy a static file verbatim; False when the destination already matches."""
    return write_bytes(output_dir, rel, src.read_bytes())


def clean_output_dir(output_dir: Path, project_root: Path) -> None:
    """Remove output_dir, refusing the project root or anything outside it."""
    if not output_dir.exists():
        return
    output_resolved = output_dir.resolve()
    root_resolved = project_root.resolve()
    if output_resolved == root_resolved:
        raise ConfigError("Refusing to clean the project root")
    if not output_resolved.is_relative_to(root_resolved):
        raise ConfigError(f"Refusing to clean output directory outside the project: {output_resolved}")
    shutil.rmtree(output_resolved)
