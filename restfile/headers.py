"""Case-insensitive, order-preserving header mapping."""

from __future__ import annotations

from requests.structures import CaseInsensitiveDict

from restfile.constants import HEADER_COOKIE


class Headers(CaseInsensitiveDict):
    """Header mapping that combines repeated names instead of overwriting.

    Lookups ignore case. The casing of the first name seen for a header is the
    one reported by iteration, and insertion order is kept for serialization.
    """

    def add(self, name: str, value: str) -> None:
        """Add a header, combining with an existing value of the same name.

        Repeated ``Cookie`` headers are joined with ``;``, everything else
        with ``,``.
        """
        key = name.lower()
        existing = self._store.get(key)
        if existing is None:
            self._store[key] = (name, value)
            return
        cased, current = existing
        separator = ";" if key == HEADER_COOKIE.lower() else ","
        self._store[key] = (cased, current + separator + value)

    def get_original_name(self, name: str) -> str | None:
        """Return the stored casing of ``name``, or None when absent."""
        existing = self._store.get(name.lower())
        return existing[0] if existing else None

    def pop_matching(self, name: str, value: str) -> bool:
        """Remove ``name`` if its value equals ``value`` case-insensitively."""
        existing = self._store.get(name.lower())
        if existing is None or existing[1].lower() != value.lower():
            return False
        del self._store[name.lower()]
        return True

    def copy(self) -> "Headers":
        return Headers(self._store.values())
