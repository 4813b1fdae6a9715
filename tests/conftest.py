"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from pathlib import Path

import pytest


@pytest.fixture
def mock_reg_query_output() -> str:
    """Sample ``reg query ... /s /f icloud /d`` output for testing."""
    return (
        "\r\n"
        "HKEY_LOCAL_MACHINE\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Explorer"
        "\\SyncRootManager\\iCloudDrive!S-1-5-21!Account\r\n"
        "    DisplayNameResource    REG_SZ    iCloud Drive\r\n"
        "\r\n"
        "HKEY_LOCAL_MACHINE\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Explorer"
        "\\SyncRootManager\\iCloudDrive!S-1-5-21!Account\\UserSyncRoots\r\n"
        "    S-1-5-21-1111    REG_SZ    C:\\Users\\alice\\iCloudDrive\r\n"
        "    Flags    REG_DWORD    0x22\r\n"
        "\r\n"
        "End of search: 2 match(es) found.\r\n"
    )


@pytest.fixture
def mock_reg_fallback_output() -> str:
    """Sample output for an Apple registry key with a quoted path value."""
    return (
        "HKEY_CURRENT_USER\\Software\\Apple Inc.\\iCloud\r\n"
        '    InstallDir    REG_SZ    "D:\\Sync\\iCloud Drive"\r\n'
        "    Version    REG_SZ    14.2\r\n"
    )


@pytest.fixture
def mock_dscl_output() -> str:
    """Sample ``dscl . -list /Users`` output for testing."""
    return """_amavisd
_appleevents
daemon
nobody
root
alice
bob"""


@pytest.fixture
def mobile_documents(tmp_path: Path) -> Path:
    """Build a fake ``~/Library/Mobile Documents`` tree.

    Layout::

        home/Library/Mobile Documents/
            com~apple~CloudDocs/
                Documents/report.txt
                Photos/
                iCloud~com~apple~notes/   (marker entry)
            iCloud~com~apple~notes/
            4R6749AYRE~com~pixelmatorteam~pixelmator/
            dk~simonbs~Scriptable/
            .Trash/

    Returns:
        The fake home directory.
    """
    home = tmp_path / "home"
    docs = home / "Library" / "Mobile Documents"
    root = docs / "com~apple~CloudDocs"
    (root / "Documents").mkdir(parents=True)
    (root / "Documents" / "report.txt").write_text("report")
    (root / "Photos").mkdir()
    (root / "iCloud~com~apple~notes").mkdir()
    (docs / "iCloud~com~apple~notes").mkdir()
    (docs / "4R6749AYRE~com~pixelmatorteam~pixelmator").mkdir()
    (docs / "dk~simonbs~Scriptable").mkdir()
    (docs / ".Trash").mkdir()
    return home
