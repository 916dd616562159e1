"""Shared fixtures for the maintenance tests."""

import itertools
from datetime import date

import httpx
import pytest

from motomaint import ReplacedPart, ServiceKind, ServiceRecord, Vehicle

TODAY = date(2025, 6, 1)

_ids = itertools.count(1)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def honda():
    return Vehicle("cb600", "Honda", "CB 600F", 2018, "ABC1234")


@pytest.fixture
def make_record():
    """Factory for service records on the 'cb600' vehicle."""

    def _make(
        when,
        odometer,
        description,
        kind=ServiceKind.PREVENTIVE,
        cost=100.0,
        parts=(),
        vehicle_id="cb600",
        **kwargs,
    ):
        return ServiceRecord(
            id=f"r{next(_ids)}",
            vehicle_id=vehicle_id,
            date=when,
            odometer=odometer,
            kind=kind,
            description=description,
            cost=cost,
            replaced_parts=[p if isinstance(p, ReplacedPart) else ReplacedPart(p) for p in parts],
            **kwargs,
        )

    return _make


@pytest.fixture
def mock_client():
    """
    Factory for an httpx.Client whose responses come from a handler.

    The returned client records every request in `client.requests`.
    """

    def _make(handler):
        requests = []

        def _handler(request):
            requests.append(request)
            return handler(request)

        client = httpx.Client(transport=httpx.MockTransport(_handler))
        client.requests = requests
        return client

    return _make
