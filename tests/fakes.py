# tests/fakes.py

from __future__ import annotations

from collections.abc import Iterable

from tsktrack.core.ports import EntityKind, SearchDocument


class FakeSearchIndex:
    """
    In-memory SearchIndex for unit tests.

    - Captures rebuilt documents per kind
    - query() returns ids whose indexed text contains every word of the phrase
    """

    def __init__(self) -> None:
        self.documents: dict[EntityKind, list[SearchDocument]] = {}

    def rebuild(self, kind: EntityKind, documents: Iterable[SearchDocument]) -> int:
        self.documents[kind] = list(documents)
        return len(self.documents[kind])

    def query(self, kind: EntityKind, phrase: str, limit: int = 10) -> list[str]:
        words = phrase.lower().split()
        hits: list[str] = []
        for doc in self.documents.get(kind, []):
            text = " ".join(str(v) for k, v in doc.items() if k != "ID").lower()
            if all(w in text for w in words):
                hits.append(doc["ID"])
        return hits[:limit]
