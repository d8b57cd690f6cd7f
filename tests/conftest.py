"""Global test fixtures."""

import pytest

from composeapp.domain.shared.port.progress import RecordingProgressReporter


@pytest.fixture
def progress() -> RecordingProgressReporter:
    return RecordingProgressReporter()
