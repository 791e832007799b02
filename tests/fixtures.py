from __future__ import annotations

import os
from pathlib import Path

# The two-file tree used throughout the builder tests:
# a/b.txt is plain text, a/c.sh is an executable script.
SAMPLE_TREE: dict[str, tuple[bytes, int]] = {
    "a/b.txt": (b"hi", 0o644),
    "a/c.sh": (b"bye", 0o755),
}


def make_tree(root: Path, files: dict[str, tuple[bytes, int]]) -> Path:
    """Create ``files`` under ``root`` with explicit permission bits.

    Modes are applied with chmod so the process umask cannot change them.
    """

    root.mkdir(parents=True, exist_ok=True)
    for rel, (content, mode) in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        os.chmod(path, mode)
    return root
