"""Durable token storage.

One key, one raw token string. An absent entry means "logged out".
Only SessionStore reads or writes these objects.
"""
from abc import ABC, abstractmethod
from pathlib import Path


class TokenStorage(ABC):
    @abstractmethod
    def read(self) -> str | None: ...

    @abstractmethod
    def write(self, token: str) -> None: ...

    @abstractmethod
    def clear(self) -> None: ...


class MemoryTokenStorage(TokenStorage):
    def __init__(self, token: str | None = None):
        self.token = token

    def read(self) -> str | None:
        return self.token

    def write(self, token: str) -> None:
        self.token = token

    def clear(self) -> None:
        self.token = None


class FileTokenStorage(TokenStorage):
    """Token kept as the whole content of a single file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def read(self) -> str | None:
        try:
            token = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        return token or None

    def write(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(token, encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
