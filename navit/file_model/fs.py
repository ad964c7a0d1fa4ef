"""Filesystem primitives for directory listing, previews, and mutations.

Every primitive either returns its result or raises an ``OSError`` subclass.
Nothing here touches session state; callers decide how failures surface.
"""

from __future__ import annotations

import errno
import os
import shutil
import stat as stat_module
from datetime import datetime
from pathlib import Path

from .types import KIND_DIRECTORY, KIND_FILE, KIND_SYMLINK, Entry, PreviewPayload

DEFAULT_PREVIEW_MAX_BYTES = 1024 * 1024
BINARY_SNIFF_BYTES = 8000
BINARY_CONTROL_RATIO = 0.1
_PERMISSION_TRIPLETS = ("---", "--x", "-w-", "-wx", "r--", "r-x", "rw-", "rwx")


def is_hidden_name(name: str) -> bool:
    """Return whether ``name`` follows the dot-file hidden convention."""
    return name.startswith(".")


def format_permissions(mode: int) -> str:
    """Render permission bits as a 9-character ``rwxr-xr-x`` string."""
    owner = _PERMISSION_TRIPLETS[(mode >> 6) & 7]
    group = _PERMISSION_TRIPLETS[(mode >> 3) & 7]
    other = _PERMISSION_TRIPLETS[mode & 7]
    return f"{owner}{group}{other}"


def _created_time(st: os.stat_result) -> datetime:
    birthtime = getattr(st, "st_birthtime", None)
    if birthtime is None:
        birthtime = st.st_ctime
    return datetime.fromtimestamp(birthtime)


def entry_sort_key(entry: Entry) -> tuple[bool, str, str]:
    """Directories first, then case-insensitive name, then exact name."""
    return (not entry.is_dir, entry.name.lower(), entry.name)


def build_entry(directory: Path, name: str) -> Entry:
    """Stat one directory child into an ``Entry``.

    Children that cannot be stat'ed are still returned with minimal metadata.
    """
    child_path = directory / name
    hidden = is_hidden_name(name)
    try:
        lst = os.lstat(child_path)
    except OSError:
        return Entry(name=name, path=child_path, kind=KIND_FILE, is_dir=False, hidden=hidden)

    is_symlink = stat_module.S_ISLNK(lst.st_mode)
    st = lst
    if is_symlink:
        try:
            st = os.stat(child_path)
        except OSError:
            # Dangling link: describe the link itself.
            st = lst
    is_dir = stat_module.S_ISDIR(st.st_mode)
    if is_symlink:
        kind = KIND_SYMLINK
    elif is_dir:
        kind = KIND_DIRECTORY
    else:
        kind = KIND_FILE

    extension = None
    if not is_dir:
        extension = os.path.splitext(name)[1].lower() or None

    return Entry(
        name=name,
        path=child_path,
        kind=kind,
        is_dir=is_dir,
        hidden=hidden,
        size=None if is_dir else int(st.st_size),
        modified=datetime.fromtimestamp(st.st_mtime),
        created=_created_time(st),
        permissions=format_permissions(st.st_mode),
        extension=extension,
    )


def list_directory(directory: Path, show_hidden: bool) -> list[Entry]:
    """List ``directory`` sorted directories-first then by case-insensitive name.

    Raises ``OSError`` when the directory itself cannot be read.
    """
    directory = Path(directory)
    with os.scandir(directory) as iterator:
        names = [child.name for child in iterator]

    entries = [
        build_entry(directory, name)
        for name in names
        if show_hidden or not is_hidden_name(name)
    ]
    entries.sort(key=entry_sort_key)
    return entries


def is_binary_content(data: bytes) -> bool:
    """Heuristically classify ``data`` as binary.

    A NUL byte in the sniffed prefix is decisive; otherwise more than 10% of
    control bytes (excluding tab, LF, CR) marks the content binary.
    """
    sample = data[:BINARY_SNIFF_BYTES]
    if not sample:
        return False
    if b"\0" in sample:
        return True
    control = sum(1 for byte in sample if byte < 32 and byte not in (9, 10, 13))
    return control / len(sample) > BINARY_CONTROL_RATIO


def decode_preview_bytes(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        # Truncation can split a multi-byte sequence.
        return data.decode("utf-8", errors="replace")


def read_preview(path: Path, max_bytes: int = DEFAULT_PREVIEW_MAX_BYTES) -> PreviewPayload:
    """Read at most ``max_bytes`` of ``path`` for preview display."""
    limit = max(0, int(max_bytes))
    with open(path, "rb") as handle:
        data = handle.read(limit + 1)
    truncated = len(data) > limit
    if truncated:
        data = data[:limit]
    if is_binary_content(data):
        return PreviewPayload(content="", is_binary=True, truncated=truncated)
    return PreviewPayload(content=decode_preview_bytes(data), is_binary=False, truncated=truncated)


def path_exists(path: Path) -> bool:
    """Return whether anything (including a dangling symlink) occupies ``path``."""
    return os.path.lexists(path)


def _ensure_vacant(dest: Path) -> None:
    if path_exists(dest):
        raise FileExistsError(errno.EEXIST, os.strerror(errno.EEXIST), str(dest))


def copy_path(src: Path, dest: Path) -> None:
    """Copy a file or directory tree to a vacant ``dest``."""
    _ensure_vacant(dest)
    if os.path.isdir(src) and not os.path.islink(src):
        shutil.copytree(src, dest, symlinks=True)
    else:
        shutil.copy2(src, dest, follow_symlinks=False)


def move_path(src: Path, dest: Path) -> None:
    """Move ``src`` to a vacant ``dest``."""
    _ensure_vacant(dest)
    if not path_exists(src):
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(src))
    shutil.move(os.fspath(src), os.fspath(dest))


def delete_path(path: Path) -> None:
    """Delete a file, symlink, or whole directory tree."""
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    else:
        os.unlink(path)


def make_directory(path: Path) -> None:
    Path(path).mkdir(parents=True, exist_ok=False)


def create_file(path: Path, content: str = "") -> None:
    with open(path, "x", encoding="utf-8") as handle:
        handle.write(content)


def rename_path(src: Path, dest: Path) -> None:
    _ensure_vacant(dest)
    os.rename(src, dest)


def resolve_user_path(text: str, base: Path) -> Path:
    """Expand ``~`` and make ``text`` absolute relative to ``base``.

    The result is normalized but symlinks are left unresolved.
    """
    expanded = os.path.expanduser(text.strip())
    if not os.path.isabs(expanded):
        expanded = os.path.join(os.fspath(base), expanded)
    return Path(os.path.normpath(expanded))


def parent_directory(path: Path) -> Path | None:
    """Return the parent of ``path`` or ``None`` at the filesystem root."""
    parent = Path(path).parent
    if parent == Path(path):
        return None
    return parent


__all__ = [
    "DEFAULT_PREVIEW_MAX_BYTES",
    "is_hidden_name",
    "format_permissions",
    "entry_sort_key",
    "build_entry",
    "list_directory",
    "is_binary_content",
    "read_preview",
    "path_exists",
    "copy_path",
    "move_path",
    "delete_path",
    "make_directory",
    "create_file",
    "rename_path",
    "resolve_user_path",
    "parent_directory",
]
