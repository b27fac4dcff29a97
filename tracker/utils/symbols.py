from tracker.config import app_config

FREE = "free"
ENUMERATED = "enumerated"


def normalize_symbol(raw: str) -> str:
    """Strip + uppercase a user-typed ticker.

    Examples:
        ' aapl ' → 'AAPL'
        'Tsla'   → 'TSLA'
    """
    return raw.strip().upper()


def known_symbols() -> list[str]:
    return [normalize_symbol(s) for s in app_config.get("symbols", {}).get("known", [])]


def symbol_policy() -> str:
    return app_config.get("symbols", {}).get("policy", FREE)


def is_allowed_symbol(symbol: str, policy: str | None = None, known: list[str] | None = None) -> bool:
    """Free policy accepts any non-empty ticker; enumerated only the known list."""
    symbol = normalize_symbol(symbol)
    if not symbol:
        return False
    policy = policy or symbol_policy()
    if policy == ENUMERATED:
        return symbol in (known if known is not None else known_symbols())
    return True
