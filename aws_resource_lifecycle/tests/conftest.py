"""Shared fixtures for resource lifecycle tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator, List, Tuple

import boto3
import pytest
from botocore.stub import Stubber


PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


from aws_resource_lifecycle.context import OperationContext


class ManualClock:
    """Clock that only moves when a retry loop waits."""

    def __init__(self) -> None:
        self.now = 0.0
        self.waits: List[float] = []

    def __call__(self) -> float:
        return self.now


class ManualContext(OperationContext):
    """Operation context whose waits advance a :class:`ManualClock` instantly."""

    def wait(self, seconds: float) -> None:
        self.clock.waits.append(seconds)
        self.clock.now += seconds


def _stubbed_client(service: str) -> Iterator[Tuple[object, Stubber]]:
    client = boto3.client(
        service,
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
    with Stubber(client) as stubber:
        yield client, stubber
        stubber.assert_no_pending_responses()


@pytest.fixture
def autoscaling_stub() -> Iterator[Tuple[object, Stubber]]:
    yield from _stubbed_client("autoscaling")


@pytest.fixture
def location_stub() -> Iterator[Tuple[object, Stubber]]:
    yield from _stubbed_client("location")


@pytest.fixture
def manual_context() -> ManualContext:
    return ManualContext(clock=ManualClock())
