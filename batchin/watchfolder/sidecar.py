"""Sidecar file name derivation."""

from pathlib import PurePosixPath

SIDECAR_EXTENSION = "xml"


def derive_sidecar_name(file_name: str) -> str | None:
    """Derive the sidecar metadata file name for a content file.

    The directory part is dropped and only the last extension is replaced,
    so ``/path/to/abc_123.N.005.tif`` gives ``abc_123.N.005.xml``. A name
    without an extension (including dot files such as ``.hidden``) keeps
    its full name as stem.

    Args:
        file_name: Content file name, optionally with directories

    Returns:
        Sidecar file name, or None when there is no file name to derive from
    """
    if not file_name:
        return None

    name = PurePosixPath(file_name).name
    if name in ("", ".", ".."):
        return None

    stem, separator, _ = name.rpartition(".")
    if not separator or not stem:
        stem = name

    return f"{stem}.{SIDECAR_EXTENSION}"
