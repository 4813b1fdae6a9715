"""Copy pipeline: plan and execute copies into discovered folders."""

from icloudy.transfer.copier import (
    CopyError,
    FileCopier,
    NoFilesToCopyError,
    NoValidTargetPathError,
    RecursionRequiredError,
    SourceNotFoundError,
)

__all__ = [
    "CopyError",
    "FileCopier",
    "NoFilesToCopyError",
    "NoValidTargetPathError",
    "RecursionRequiredError",
    "SourceNotFoundError",
]
