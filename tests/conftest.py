"""Shared test fixtures for the batch processing engine."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterator

# Must be set before batch_common builds its logger and tracer
os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "1")
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "batch_processing_test")

import pytest

from batch_common.config import get_config
from tests.events import RecordingHandler


@dataclass
class FakeLambdaContext:
    function_name: str = "batch-processor"
    memory_limit_in_mb: int = 128
    invoked_function_arn: str = "arn:aws:lambda:eu-west-1:123456789012:function:batch-processor"
    aws_request_id: str = "52fdfc07-2182-154f-163f-5f0f9a621d72"


@pytest.fixture(autouse=True)
def reset_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Start every test from the default batch settings and an empty config cache."""
    for name in list(os.environ):
        if name.startswith("POWERTOOLS_BATCH_"):
            monkeypatch.delenv(name)
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def lambda_context() -> FakeLambdaContext:
    return FakeLambdaContext()


@pytest.fixture
def recording_handler() -> type[RecordingHandler]:
    """Factory for RecordingHandler instances."""
    return RecordingHandler
