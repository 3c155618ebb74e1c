import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
if SRC.exists():
    sys.path.insert(0, str(SRC))

# Register shared Hypothesis profiles for deterministic CI runs and fast local loops.
from tests.util import hypothesis_profiles  # noqa: E402,F401  pylint: disable=unused-import


@pytest.fixture
def roster_file(tmp_path: Path) -> Path:
    """Five-record roster with one duplicate id and one malformed line."""

    path = tmp_path / "roster.txt"
    path.write_text(
        "7\n"
        "1001 Johnson\n"
        "1002 Elfar\n"
        "1003 Nguyen\n"
        "not-a-record\n"
        "1002 Duplicate\n"
        "1004 Okafor\n"
        "1005 Schmidt\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture(autouse=True)
def _clean_probeset_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "PROBESET_CONFIG",
        "PROBESET_MIN_CAPACITY",
        "PROBESET_LOADER_STRICT",
        "PROBESET_MAX_RECORDS",
        "PROBESET_ENCODING",
    ):
        monkeypatch.delenv(name, raising=False)
