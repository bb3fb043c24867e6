"""Request id acceptance rules."""

import uuid

from codearena.middleware.request_id import resolve_request_id


def test_wellformed_id_kept() -> None:
    assert resolve_request_id("trace-01:abc.def") == "trace-01:abc.def"


def test_missing_id_minted() -> None:
    minted = resolve_request_id(None)
    assert uuid.UUID(minted).version == 4


def test_malformed_ids_replaced() -> None:
    for bad in ("", "has space", "x" * 65, "line\nbreak"):
        assert resolve_request_id(bad) != bad
