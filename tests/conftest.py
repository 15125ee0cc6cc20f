from __future__ import annotations

import sys
import textwrap
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


import pytest

from builder.recording import RecordingBuilder
from core.errors import TargetfileError
from core.interpreter import interpret


@pytest.fixture
def builder():
    return RecordingBuilder()


@pytest.fixture
def run_target(builder):
    """Interpret dedented target-file text and return the recording builder."""

    def _run(text: str, target: str = "build", *, recorder: RecordingBuilder | None = None, **kwargs):
        recorder = recorder or builder
        interpret(textwrap.dedent(text), target, recorder, **kwargs)
        return recorder

    return _run


@pytest.fixture
def target_error(builder):
    """Interpret text that must fail and return the raised error."""

    def _error(text: str, target: str = "build", **kwargs) -> TargetfileError:
        with pytest.raises(TargetfileError) as info:
            interpret(textwrap.dedent(text), target, builder, **kwargs)
        return info.value

    return _error
