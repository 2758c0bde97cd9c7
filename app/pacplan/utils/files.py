"""Private, atomic file writes for generated artifacts."""

import os
from pathlib import Path
from tempfile import NamedTemporaryFile

from pacplan.core.errors import FilesystemError

PRIVATE_DIR_MODE = 0o700
PRIVATE_FILE_MODE = 0o600


def write_private_text(path: Path, content: str, *, name: str) -> Path:
    """Atomically write ``content`` to ``path`` readable by the owner only.

    The parent directory is created with mode 0700 when missing. The
    file is written to a temporary sibling, restricted to mode 0600 and
    renamed over the target with os.replace().

    Args:
        path: Destination file.
        content: Text to write.
        name: Human-readable artifact name for error messages.

    Returns:
        The destination path.

    Raises:
        FilesystemError: If the directory or file cannot be written.
    """
    parent = path.parent
    try:
        if not parent.exists():
            parent.mkdir(parents=True, mode=PRIVATE_DIR_MODE)
    except OSError as e:
        msg = f"Failed to create {name} directory {parent}: {e}"
        raise FilesystemError(msg) from e

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            os.chmod(f.name, PRIVATE_FILE_MODE)
            f.write(content)
        os.replace(str(tmp_path), str(path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        msg = f"Failed to write {name} {path}: {e}"
        raise FilesystemError(msg) from e
    return path
