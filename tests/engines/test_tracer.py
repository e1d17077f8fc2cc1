"""Tests for the engine tracer (divvy_engines/tracer.py)."""

from decimal import Decimal

from divvy_engines.tracer import compute_input_fingerprint, traced_engine
from divvy_kernel.domain.values import Director, SplitMethod


class TestInputFingerprint:

    def test_deterministic(self):
        args = {"pool": Decimal("10.00"), "method": SplitMethod.EQUAL}
        assert compute_input_fingerprint(("pool", "method"), args) == compute_input_fingerprint(
            ("pool", "method"), dict(args)
        )

    def test_sensitive_to_values(self):
        a = compute_input_fingerprint(("pool",), {"pool": Decimal("10.00")})
        b = compute_input_fingerprint(("pool",), {"pool": Decimal("10.01")})
        assert a != b

    def test_dataclasses_canonicalised(self):
        d1 = [Director(id="1", name="A", split_percent="0.5")]
        d2 = [Director(id="1", name="A", split_percent=Decimal("0.5"))]
        assert compute_input_fingerprint(("directors",), {"directors": d1}) == (
            compute_input_fingerprint(("directors",), {"directors": d2})
        )

    def test_missing_field_is_null(self):
        assert len(compute_input_fingerprint(("absent",), {})) == 16


class TestTracedEngine:

    def test_positional_and_keyword_calls_match(self, captured_logs):
        @traced_engine("double", "0.1", fingerprint_fields=("value",))
        def double(value):
            return value * 2

        assert double(Decimal("2")) == Decimal("4")
        assert double(value=Decimal("2")) == Decimal("4")

        traces = [r for r in captured_logs() if r["message"] == "DIVVY_ENGINE_TRACE"]
        assert len(traces) == 2
        assert traces[0]["input_fingerprint"] == traces[1]["input_fingerprint"]
        assert traces[0]["engine_version"] == "0.1"
        assert traces[0]["duration_ms"] >= 0

    def test_preserves_function_metadata(self):
        @traced_engine("noop", "1.0")
        def noop():
            """Does nothing."""

        assert noop.__name__ == "noop"
        assert noop.__doc__ == "Does nothing."
