"""Tests for the engine invocation tracer."""

import logging
from datetime import datetime

from legal_engines.tracer import compute_input_fingerprint, traced_engine
from legal_kernel.domain.request import RequestStatus


@traced_engine("sample", "2.1", fingerprint_fields=("a", "b"))
def _sample(a, b=None, c=None):
    return (a, b, c)


class TestFingerprint:

    def test_deterministic(self):
        args = {"a": 1, "b": datetime(2024, 1, 1, 9)}
        assert compute_input_fingerprint(("a", "b"), args) == compute_input_fingerprint(
            ("a", "b"), dict(args)
        )

    def test_sixteen_hex_chars(self):
        fp = compute_input_fingerprint(("a",), {"a": "x"})
        assert len(fp) == 16
        int(fp, 16)

    def test_only_selected_fields(self):
        assert compute_input_fingerprint(("a",), {"a": 1, "b": 2}) == compute_input_fingerprint(
            ("a",), {"a": 1, "b": 3}
        )

    def test_missing_field_is_null(self):
        assert compute_input_fingerprint(("a",), {}) == compute_input_fingerprint(
            ("a",), {"a": None}
        )

    def test_enum_uses_value(self):
        assert compute_input_fingerprint(
            ("s",), {"s": RequestStatus.DRAFT}
        ) == compute_input_fingerprint(("s",), {"s": "Draft"})

    def test_dict_key_order_irrelevant(self):
        assert compute_input_fingerprint(
            ("d",), {"d": {"x": 1, "y": 2}}
        ) == compute_input_fingerprint(("d",), {"d": {"y": 2, "x": 1}})


class TestTracedEngine:

    def test_returns_result(self):
        assert _sample(1, b=2, c=3) == (1, 2, 3)

    def test_emits_trace(self, caplog):
        caplog.set_level(logging.INFO, logger="legal_kernel")
        _sample(1, 2)

        record = next(r for r in caplog.records if r.getMessage() == "LEGAL_ENGINE_TRACE")
        assert record.engine_name == "sample"
        assert record.engine_version == "2.1"
        assert record.duration_ms >= 0
        assert record.function == "_sample"

    def test_positional_and_keyword_fingerprint_match(self, caplog):
        caplog.set_level(logging.INFO, logger="legal_kernel")
        _sample(1, 2)
        _sample(a=1, b=2)

        fps = [
            r.input_fingerprint for r in caplog.records if r.getMessage() == "LEGAL_ENGINE_TRACE"
        ]
        assert len(fps) == 2
        assert fps[0] == fps[1]

    def test_preserves_metadata(self):
        assert _sample.__name__ == "_sample"
