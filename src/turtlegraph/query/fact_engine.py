from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from turtlegraph.errors import FactSourceError
from turtlegraph.query.terms import Literal, Pattern, Term, Variable

if TYPE_CHECKING:
    from turtlegraph.graph.graph_store import GraphStore

logger = logging.getLogger(__name__)

Fact = Dict[str, Any]
Bindings = Dict[str, Any]

_UNBOUND = object()


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _same(a: Any, b: Any) -> bool:
    """
    Strict equality: booleans only equal booleans, so True never matches 1.
    """
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    return a == b


class FactQueryEngine:
    """
    Single-pattern unification over flat fact records.

    A pattern maps keys to literals or ``Variable`` terms. Each fact is
    matched key by key; a fact lacking a pattern key, or holding a value
    the term rejects, contributes nothing. When a variable meets a list
    value it ranges over the list elements, one solution per element.

    There is no joining of several patterns, no rules and no negation.
    Compose queries by feeding bindings from one into the next.
    """

    def __init__(self, facts: Optional[Iterable[Mapping[str, Any]]] = None) -> None:
        self._facts: List[Fact] = []
        if facts is not None:
            self.load_facts(facts)

    @classmethod
    def from_store(cls, store: "GraphStore") -> "FactQueryEngine":
        return cls(store.facts())

    # ------------------------------------------------------------------
    # Fact sources
    # ------------------------------------------------------------------

    def load_facts(self, facts: Iterable[Mapping[str, Any]]) -> int:
        loaded = 0
        for fact in facts:
            if not isinstance(fact, Mapping):
                raise FactSourceError(
                    f"Facts must be objects, got {type(fact).__name__}", source=fact
                )
            self._facts.append(copy.deepcopy(dict(fact)))
            loaded += 1
        logger.debug("loaded %d facts (%d total)", loaded, len(self._facts))
        return loaded

    def load_facts_from_json(self, path: Union[str, Path]) -> int:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
        if not isinstance(payload, list):
            raise FactSourceError(
                "JSON file must contain an array of fact objects", source=str(path)
            )
        return self.load_facts(payload)

    def get_facts(self) -> List[Fact]:
        return copy.deepcopy(self._facts)

    def __len__(self) -> int:
        return len(self._facts)

    # ------------------------------------------------------------------
    # Querying
    # ------------------------------------------------------------------

    def query(self, pattern: Pattern) -> List[Bindings]:
        """
        All solutions of ``pattern`` against the loaded facts, in fact order.
        """
        items: Tuple[Tuple[str, Term], ...] = tuple(pattern.items())
        solutions: List[Bindings] = []
        for fact in self._facts:
            self._unify(items, 0, fact, {}, solutions)
        logger.debug("query matched %d solution(s)", len(solutions))
        return solutions

    def _unify(
        self,
        items: Sequence[Tuple[str, Term]],
        start: int,
        fact: Fact,
        bindings: Bindings,
        solutions: List[Bindings],
    ) -> None:
        for position in range(start, len(items)):
            key, term = items[position]
            if key not in fact:
                return
            value = fact[key]

            if isinstance(term, Variable):
                bound = bindings.get(term.name, _UNBOUND)

                if _is_sequence(value):
                    # fan out: one branch per element, never the whole list
                    for element in value:
                        if bound is not _UNBOUND and not _same(bound, element):
                            continue
                        self._unify(
                            items,
                            position + 1,
                            fact,
                            {**bindings, term.name: element},
                            solutions,
                        )
                    return

                if bound is _UNBOUND:
                    bindings = {**bindings, term.name: value}
                elif not _same(bound, value):
                    return
                continue

            literal = term.value if isinstance(term, Literal) else term
            if _is_sequence(value):
                if not any(_same(literal, element) for element in value):
                    return
            elif not _same(literal, value):
                return

        solutions.append(bindings)
