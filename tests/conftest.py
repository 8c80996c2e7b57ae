import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

# Subprocess coverage (test_cli runs `python -m microml.microml_cli`)
if os.getenv("COVERAGE_PROCESS_START"):
    import coverage

    coverage.process_startup()

    import coverage.collector

    def safe_stop(self: Any) -> None:
        if self in getattr(self, "_collectors", []):
            self._collectors.remove(self)

    coverage.collector.Collector.stop = safe_stop


@pytest.fixture  # type: ignore[misc]
def write_source(tmp_path: Path) -> Callable[[str, str], Path]:
    """Writes MicroML source into a temporary file and returns its path."""

    def write(source: str, name: str = "prog.ml") -> Path:
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return path

    return write
