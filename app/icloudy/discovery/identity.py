"""Application identity parsing for app-storage directory names.

iCloud keeps each application's synced data in a directory whose name
encodes the bundle identifier with ``~`` separators, optionally
prefixed by a generated team ID or an ``iCloud`` marker:

    iCloud~com~apple~notes
    4R6749AYRE~com~pixelmatorteam~pixelmator
    dk~simonbs~Scriptable

Parsing is a pure data transformation applied as an ordered list of
rules: strip ID, strip iCloud prefix, reorder vendor, join.
"""

import re
from dataclasses import dataclass

# Leading reverse-DNS tokens recognised as a vendor prefix
VENDOR_TOKENS: frozenset[str] = frozenset({"com", "dk", "md", "net", "org", "io"})

_ICLOUD_PREFIX = "iCloud"
_INSTALL_ID_RE = re.compile(r"^[A-Z0-9]+$")
_PASCAL_PAIR_RE = re.compile(r"^[A-Z][a-z]+[A-Z][a-z]+$")
_CAMEL_BOUNDARY_RE = re.compile(r"(?=[A-Z])")
_WORD_START_RE = re.compile(r"\b\w")


@dataclass(frozen=True, slots=True)
class AppIdentity:
    """Identity fields decoded from an app-storage directory name.

    All fields are None when the name is not an app-storage name.

    Attributes:
        app_id: Original directory name, verbatim.
        app_name: Human-readable application name.
        bundle_id: Dot-delimited bundle identifier.
        vendor: Publisher prefix (``com.apple``, ``dk``, ...).
    """

    app_id: str | None = None
    app_name: str | None = None
    bundle_id: str | None = None
    vendor: str | None = None

    @property
    def is_empty(self) -> bool:
        """True when nothing could be parsed."""
        return self.app_id is None


def is_app_storage_name(name: str) -> bool:
    """Check whether a directory basename follows the app-storage convention.

    Args:
        name: Directory basename.

    Returns:
        True if the name contains at least one ``~`` separator.
    """
    return "~" in name


def format_app_name(name: str) -> str:
    """Turn the last bundle component into a display name.

    ``SubApp.Module`` becomes ``SubApp Module``, ``notes`` becomes
    ``Notes``, ``MindNode`` is left alone and ``myCoolApp`` becomes
    ``My Cool App``.

    Args:
        name: Last bundle component.

    Returns:
        Human-formatted application name.
    """
    if "." in name:
        return " ".join(format_app_name(part) for part in name.split(".") if part)

    if _PASCAL_PAIR_RE.match(name):
        return name

    words = [word for word in _CAMEL_BOUNDARY_RE.split(name) if word]
    return _WORD_START_RE.sub(lambda m: m.group(0).upper(), " ".join(words))


def _vendor_for(parts: list[str]) -> str:
    if parts[0] == "com" and len(parts) > 1:
        return f"{parts[0]}.{parts[1]}"
    return parts[0]


def _rotate_vendor(parts: list[str]) -> list[str]:
    if parts[0] in VENDOR_TOKENS:
        return parts
    for index, part in enumerate(parts):
        if part in VENDOR_TOKENS:
            return [part, *parts[:index], *parts[index + 1 :]]
    return parts


def parse_app_identity(basename: str) -> AppIdentity:
    """Decode an app-storage directory name into identity fields.

    Args:
        basename: Directory basename (no separators).

    Returns:
        AppIdentity; empty when the name has fewer than two ``~`` segments.
    """
    segments = basename.split("~")
    if len(segments) < 2:
        return AppIdentity()

    parts = segments[1:] if _INSTALL_ID_RE.match(segments[0]) else list(segments)
    if parts and parts[0] == _ICLOUD_PREFIX:
        parts = parts[1:]

    parts = [part for part in parts if part]
    if not parts:
        return AppIdentity()

    bundle_parts = _rotate_vendor(parts)

    return AppIdentity(
        app_id="~".join(segments),
        app_name=format_app_name(parts[-1]),
        bundle_id=".".join(bundle_parts),
        vendor=_vendor_for(bundle_parts),
    )
