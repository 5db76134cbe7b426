import pytest

from storeadmin.utils.parse import paginate_args, parse_bool, parse_opt_float, parse_opt_int


@pytest.mark.unit
class TestParse:
    @pytest.mark.parametrize("raw, expected", [
        ("12.5", 12.5), (3, 3.0), ("", None), (None, None), ("abc", None),
    ])
    def test_opt_float(self, raw, expected):
        assert parse_opt_float(raw) == expected

    @pytest.mark.parametrize("raw", ["nan", "NaN", "inf", "-inf", "Infinity", float("nan"), float("inf")])
    def test_opt_float_rejects_non_finite(self, raw):
        assert parse_opt_float(raw) is None

    def test_opt_int(self):
        assert parse_opt_int("7") == 7
        assert parse_opt_int("null") is None
        assert parse_opt_int("x") is None

    def test_bool(self):
        assert parse_bool("Yes") is True
        assert parse_bool("0") is False
        assert parse_bool(None, default=True) is True

    def test_paginate_args_clamped(self):
        assert paginate_args({"page": "0", "per_page": "500"}) == (1, 100)
        assert paginate_args({}) == (1, 20)
