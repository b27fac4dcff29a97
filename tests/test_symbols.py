from unittest.mock import patch

from tracker.utils.symbols import (
    ENUMERATED, FREE, is_allowed_symbol, known_symbols, normalize_symbol, symbol_policy,
)


def test_normalize_strips_and_uppercases():
    assert normalize_symbol(" aapl ") == "AAPL"
    assert normalize_symbol("Tsla") == "TSLA"


def test_free_policy_accepts_any_ticker():
    assert is_allowed_symbol("whatever", policy=FREE) is True


def test_empty_symbol_never_allowed():
    assert is_allowed_symbol("  ", policy=FREE) is False
    assert is_allowed_symbol("", policy=ENUMERATED, known=["AAPL"]) is False


def test_enumerated_policy_checks_list():
    assert is_allowed_symbol("aapl", policy=ENUMERATED, known=["AAPL"]) is True
    assert is_allowed_symbol("ZZZZ", policy=ENUMERATED, known=["AAPL"]) is False


def test_reads_policy_and_list_from_app_config():
    cfg = {"symbols": {"policy": "enumerated", "known": ["msft", "AAPL"]}}
    with patch("tracker.utils.symbols.app_config", cfg):
        assert symbol_policy() == ENUMERATED
        assert known_symbols() == ["MSFT", "AAPL"]
        assert is_allowed_symbol("MSFT") is True
        assert is_allowed_symbol("TSLA") is False


def test_defaults_without_config():
    with patch("tracker.utils.symbols.app_config", {}):
        assert symbol_policy() == FREE
        assert known_symbols() == []
