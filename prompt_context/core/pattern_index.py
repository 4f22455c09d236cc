"""Aho-Corasick index over rule patterns.

Finds the same rule as a linear rules-by-patterns scan (the earliest
declared rule owning any pattern contained in the text) in a single pass over
the text, independent of the number of patterns.
"""

from collections import deque
from collections.abc import Iterable

from prompt_context.models.domain.rules import Rule


class PatternIndex:
    """Multi-pattern automaton mapping text to the earliest matching rule."""

    def __init__(self, rules: Iterable[Rule]):
        self._rules: tuple[Rule, ...] = tuple(rules)
        # Node 0 is the root. _best[n] is the lowest rule index whose pattern
        # ends at n, either directly or through its failure chain.
        self._goto: list[dict[str, int]] = [{}]
        self._fail: list[int] = [0]
        self._best: list[int | None] = [None]

        for rule_index, rule in enumerate(self._rules):
            for pattern in rule.patterns:
                self._insert(pattern, rule_index)
        self._build_failure_links()

    @property
    def node_count(self) -> int:
        return len(self._goto)

    def _insert(self, pattern: str, rule_index: int) -> None:
        node = 0
        for char in pattern:
            child = self._goto[node].get(char)
            if child is None:
                child = len(self._goto)
                self._goto.append({})
                self._fail.append(0)
                self._best.append(None)
                self._goto[node][char] = child
            node = child
        self._best[node] = _lowest(self._best[node], rule_index)

    def _build_failure_links(self) -> None:
        queue = deque(self._goto[0].values())
        while queue:
            node = queue.popleft()
            for char, child in self._goto[node].items():
                queue.append(child)
                fallback = self._fail[node]
                while fallback and char not in self._goto[fallback]:
                    fallback = self._fail[fallback]
                target = self._goto[fallback].get(char, 0)
                self._fail[child] = target
                self._best[child] = _lowest(self._best[child], self._best[target])

    def search(self, text: str) -> int | None:
        """Return the index of the earliest rule with a pattern in ``text``."""
        node = 0
        best = None
        for char in text:
            while node and char not in self._goto[node]:
                node = self._fail[node]
            node = self._goto[node].get(char, 0)
            best = _lowest(best, self._best[node])
            if best == 0:
                break
        return best

    def find(self, text: str) -> Rule | None:
        """Return the earliest rule with a pattern contained in ``text``.

        Matching is case-insensitive; ``search`` expects lower-cased text.
        """
        rule_index = self.search(text.lower())
        if rule_index is None:
            return None
        return self._rules[rule_index]


def _lowest(current: int | None, candidate: int | None) -> int | None:
    if candidate is None:
        return current
    if current is None or candidate < current:
        return candidate
    return current


__all__ = ["PatternIndex"]
