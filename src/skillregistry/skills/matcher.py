"""
Deterministic relevance matching of a free-text query against skills.

Scoring:
- each distinct query term found in a skill's triggers adds weights.term
- each stored multi-word phrase appearing as a contiguous run of the
  normalized query adds weights.phrase to every skill that owns it

Ordering is score descending, then the earliest query position at which
the skill matched, then id ascending. The same query against the same
store and index always yields the same result.
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import typing as _typing

import skillregistry.constants as constants
import skillregistry.skills.errors as errors
import skillregistry.skills.index as index_module
import skillregistry.skills.store as store_module


@_dataclasses.dataclass(frozen=True)
class ScoringWeights:
    """Points awarded per single-term hit and per phrase hit."""

    term: int = constants.DEFAULT_TERM_WEIGHT
    phrase: int = constants.DEFAULT_PHRASE_WEIGHT

    def __post_init__(self) -> None:
        if self.term <= 0 or self.phrase <= 0:
            raise errors.InvalidArgumentError(
                f"Scoring weights must be positive (term={self.term}, phrase={self.phrase})"
            )


@_dataclasses.dataclass(frozen=True)
class SkillMatch:
    """One ranked skill in a query result."""

    id: str
    score: int
    name: str
    description: str

    def to_dict(self) -> dict[str, _typing.Any]:
        """Query output entry: id, name, description and score."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "score": self.score,
        }


@_dataclasses.dataclass(frozen=True)
class QueryResult:
    """Ordered, immutable sequence of matches for one query."""

    query: str
    matches: tuple[SkillMatch, ...] = ()

    def __iter__(self) -> _abc.Iterator[SkillMatch]:
        return iter(self.matches)

    def __len__(self) -> int:
        return len(self.matches)

    def __getitem__(self, position: int) -> SkillMatch:
        return self.matches[position]

    def ids(self) -> list[str]:
        """Matched skill ids in rank order."""
        return [m.id for m in self.matches]

    def pairs(self) -> list[tuple[str, int]]:
        """(id, score) pairs in rank order."""
        return [(m.id, m.score) for m in self.matches]

    def to_list(self) -> list[dict[str, _typing.Any]]:
        """Serializable form of every match."""
        return [m.to_dict() for m in self.matches]


def _validate_limit(limit: int) -> None:
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise errors.InvalidArgumentError(f"limit must be an integer, got {limit!r}")
    if limit <= 0:
        raise errors.InvalidArgumentError(f"limit must be positive, got {limit}")


def match(
    query: str,
    store: store_module.SkillStore,
    index: index_module.TriggerIndex,
    limit: int,
    *,
    weights: ScoringWeights | None = None,
) -> QueryResult:
    """
    Score and rank skills for a free-text query.

    Args:
        query: Description of the current development context.
        store: Store the index was built from.
        index: Trigger index for store.
        limit: Maximum number of matches to return.
        weights: Scoring weights. Defaults to ScoringWeights().

    Returns:
        QueryResult; empty when the query has no recognized terms.

    Raises:
        InvalidArgumentError: If limit is not a positive integer.
    """
    _validate_limit(limit)
    weights = weights or ScoringWeights()

    terms = index.normalizer.terms(query)
    if not terms:
        return QueryResult(query=query)

    scores: dict[str, int] = {}
    first_hit: dict[str, int] = {}

    def _award(skill_ids: _abc.Iterable[str], points: int, position: int) -> None:
        for skill_id in skill_ids:
            scores[skill_id] = scores.get(skill_id, 0) + points
            if position < first_hit.get(skill_id, len(terms)):
                first_hit[skill_id] = position

    seen_terms: set[str] = set()
    for position, term in enumerate(terms):
        if term in seen_terms:
            continue
        seen_terms.add(term)
        _award(index.get_key(term), weights.term, position)

    seen_phrases: set[str] = set()
    for length in index.phrase_lengths:
        if length > len(terms):
            break
        for start in range(len(terms) - length + 1):
            key = " ".join(terms[start : start + length])
            if key in seen_phrases:
                continue
            owners = index.get_key(key)
            if owners:
                seen_phrases.add(key)
                _award(owners, weights.phrase, start)

    ranked = sorted(
        (skill_id for skill_id, score in scores.items() if score > 0),
        key=lambda skill_id: (-scores[skill_id], first_hit[skill_id], skill_id),
    )

    matches = []
    for skill_id in ranked[:limit]:
        record = store.get(skill_id)
        matches.append(
            SkillMatch(
                id=skill_id,
                score=scores[skill_id],
                name=record.name,
                description=record.description,
            )
        )
    return QueryResult(query=query, matches=tuple(matches))
