from __future__ import annotations


def containing_folder(name: str) -> str:
    """Folder part of a slash-separated archive path ("" at the root)."""
    parts = name.split("/")
    parts.pop()
    return "/".join(parts)


def folder_prefix(folder: str) -> str:
    return folder + "/" if folder else ""


def matches_name(path: str, name: str) -> bool:
    """True when path is name itself or name inside any folder."""
    return path == name or path.endswith("/" + name)
