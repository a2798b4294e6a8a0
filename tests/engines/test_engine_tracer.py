"""Tests for the engine tracer decorator."""

from decimal import Decimal

from payroll_engines.tracer import compute_input_fingerprint, traced_engine


class TestFingerprint:

    def test_deterministic(self):
        a = compute_input_fingerprint(("gross",), {"gross": Decimal("1000000")})
        b = compute_input_fingerprint(("gross",), {"gross": Decimal("1000000")})
        assert a == b
        assert len(a) == 16

    def test_trailing_zeros_do_not_matter(self):
        a = compute_input_fingerprint(("gross",), {"gross": Decimal("1000000")})
        b = compute_input_fingerprint(("gross",), {"gross": Decimal("1000000.00")})
        assert a == b

    def test_different_inputs_differ(self):
        a = compute_input_fingerprint(("gross",), {"gross": Decimal("1")})
        b = compute_input_fingerprint(("gross",), {"gross": Decimal("2")})
        assert a != b

    def test_missing_field_is_null(self):
        assert compute_input_fingerprint(("x",), {}) == compute_input_fingerprint(
            ("x",), {"x": None}
        )


class TestTracedEngine:

    def test_positional_arguments_fingerprinted(self, captured_logs):
        @traced_engine("double", "1.0", fingerprint_fields=("value",))
        def double(value):
            return value * 2

        assert double(Decimal("2")) == Decimal("4")
        double(value=Decimal("2"))

        traces = [r for r in captured_logs() if r["message"] == "PAYROLL_ENGINE_TRACE"]
        assert len(traces) == 2
        assert traces[0]["input_fingerprint"] == traces[1]["input_fingerprint"]
        assert traces[0]["engine_version"] == "1.0"
