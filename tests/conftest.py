from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

# Ensure src/ is importable when the package is not installed
ROOT = TESTS_DIR.parent
for extra in (ROOT, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import RecordingBackends, WorkspaceBuilder  # noqa: E402


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    """Provide a helper bound to pytest's per-test tmp directory."""

    return WorkspaceBuilder(tmp_path)


@pytest.fixture
def backends() -> RecordingBackends:
    """Recording fake backends; set ``fail_on`` to make items fail."""

    return RecordingBackends()


@pytest.fixture(autouse=True)
def _isolated_data_home(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    for key in list(os.environ):
        if key.startswith("DOCMORPH_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("DOCMORPH_DATA_HOME", str(tmp_path / "data-home"))
