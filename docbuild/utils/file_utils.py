from pathlib import Path, PurePosixPath

from docbuild.core.errors import ValidationError


def resolve_inside(root: Path, folder: str, name: str) -> Path:
    """
    Join ``folder/name`` under ``root`` and reject anything that would land outside it.

    Absolute paths, ``..`` segments and NUL bytes are refused rather than normalised away.
    """
    if not name or name.endswith("/"):
        raise ValidationError(f"invalid file name: {name!r}")
    if "\x00" in name or "\x00" in (folder or ""):
        raise ValidationError("file path contains a NUL byte")

    relative = PurePosixPath(folder or ".") / name
    if relative.is_absolute() or ".." in relative.parts:
        raise ValidationError(f"file path escapes the workspace: {relative}")

    target = (root / relative).resolve()
    if not target.is_relative_to(root.resolve()):
        raise ValidationError(f"file path escapes the workspace: {relative}")
    return target


def bounded(text: str, limit: int) -> str:
    """Keep the last ``limit`` characters of tool output; errors are usually at the end."""
    text = (text or "").strip()
    if len(text) <= limit:
        return text
    return "..." + text[-limit:]


def decode_output(raw: bytes | str | None) -> str:
    if raw is None:
        return ""
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return raw
