# Overview: Pytest coverage for environment-driven settings.

import pytest

from stageops.config import _optional_int


class TestOptionalInt:
    def test_unset_or_blank_is_unlimited(self, monkeypatch):
        monkeypatch.delenv("PAYMENT_MAX_SUBMISSIONS", raising=False)
        assert _optional_int("PAYMENT_MAX_SUBMISSIONS") is None
        monkeypatch.setenv("PAYMENT_MAX_SUBMISSIONS", "  ")
        assert _optional_int("PAYMENT_MAX_SUBMISSIONS") is None

    def test_parses_integer(self, monkeypatch):
        monkeypatch.setenv("PAYMENT_MAX_SUBMISSIONS", " 3 ")
        assert _optional_int("PAYMENT_MAX_SUBMISSIONS") == 3

    def test_bad_value_names_the_variable(self, monkeypatch):
        monkeypatch.setenv("PAYMENT_MAX_SUBMISSIONS", "three")
        with pytest.raises(ValueError, match="PAYMENT_MAX_SUBMISSIONS"):
            _optional_int("PAYMENT_MAX_SUBMISSIONS")
