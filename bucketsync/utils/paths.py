# bucketsync Key Utilities
# Object key manipulation (always "/" separated, independent of the OS)

import posixpath


def normalize_prefix(prefix: str) -> str:
    """
    Normalize a key prefix to directory form.

    ``"logs"`` and ``"logs/"`` both become ``"logs/"`` so that listing
    ``logs`` never picks up ``logs-archive/...``. An empty prefix (the
    whole bucket) stays empty.
    """
    prefix = prefix.lstrip("/")
    if prefix and not prefix.endswith("/"):
        prefix += "/"
    return prefix


def join_key(prefix: str, name: str) -> str:
    """
    Join a key prefix and a name.

    Args:
        prefix: Key prefix, with or without trailing slash. May be empty.
        name: Key or key fragment to append.

    Returns:
        Joined key without a leading slash.
    """
    if not prefix:
        return name.lstrip("/")
    if not name:
        return prefix
    return posixpath.join(prefix, name.lstrip("/"))


def key_basename(key: str) -> str:
    """
    Return the last path segment of a key.

    Trailing slashes are ignored, so ``a/b/`` yields ``b``.
    """
    return posixpath.basename(key.rstrip("/"))


def relative_key(key: str, prefix: str) -> str:
    """
    Strip a listing prefix from a key.

    Args:
        key: Full object key as returned by the listing.
        prefix: Normalized prefix the listing was made with.

    Returns:
        Key relative to the prefix. ``prefix + result == key`` holds
        for every key under the prefix.
    """
    if prefix and key.startswith(prefix):
        return key[len(prefix):]
    return key


def is_directory_marker(key: str, size: int) -> bool:
    """Check if a key is an empty "folder" placeholder object."""
    return size == 0 and key.endswith("/")
