"""
Tests for query matching.

Tests verify that:
- Term and phrase hits are scored and ranked deterministically
- Empty or unrecognized queries match nothing
- Limits are validated before any work is done
"""

import typing as _typing

import pytest as _pytest

import skillregistry.skills.errors as errors
import skillregistry.skills.index as index
import skillregistry.skills.matcher as matcher
import skillregistry.skills.store as store


def _build(
    records: list[dict[str, _typing.Any]],
) -> tuple[store.SkillStore, index.TriggerIndex]:
    skill_store = store.SkillStore.load(records)
    return skill_store, index.TriggerIndex.build(skill_store)


class TestRanking:
    """Tests for scoring and ordering."""

    def test_livewire_development_session(
        self,
        sample_store: store.SkillStore,
        sample_index: index.TriggerIndex,
    ) -> None:
        """TALL ranks ahead of Sail for a Livewire development session."""
        result = matcher.match(
            "starting Livewire development session", sample_store, sample_index, 2
        )
        assert result.ids() == ["tall", "sail"]
        assert result.pairs() == [("tall", 2), ("sail", 2)]

    def test_livewire_session_hits_decide_the_tie(
        self,
        sample_store: store.SkillStore,
        sample_index: index.TriggerIndex,
    ) -> None:
        """TALL wins the tie on "livewire", which precedes "development" in the query."""
        assert matcher.match("starting", sample_store, sample_index, 5).ids() == []
        assert sample_index.lookup("livewire") == frozenset({"tall"})
        assert sample_index.lookup("development") == frozenset({"sail"})
        assert sample_index.lookup("session") == frozenset({"tall", "sail"})

    def test_limit_truncates(
        self,
        sample_store: store.SkillStore,
        sample_index: index.TriggerIndex,
    ) -> None:
        """Only the top matches up to limit are returned."""
        result = matcher.match(
            "starting Livewire development session", sample_store, sample_index, 1
        )
        assert result.ids() == ["tall"]

    def test_phrase_hit_adds_bonus(
        self,
        sample_store: store.SkillStore,
        sample_index: index.TriggerIndex,
    ) -> None:
        """A contiguous phrase adds its weight on top of its term hits."""
        result = matcher.match(
            "need help with tailwind styling today", sample_store, sample_index, 5
        )
        assert result.pairs() == [("tall", 4)]

    def test_non_contiguous_words_are_not_a_phrase(
        self,
        sample_store: store.SkillStore,
        sample_index: index.TriggerIndex,
    ) -> None:
        """Phrase words out of order only score as terms."""
        result = matcher.match("styling with tailwind", sample_store, sample_index, 5)
        assert result.pairs() == [("tall", 2)]

    def test_repeated_terms_count_once(
        self,
        sample_store: store.SkillStore,
        sample_index: index.TriggerIndex,
    ) -> None:
        """Repeating a word in the query does not inflate the score."""
        result = matcher.match("livewire livewire Livewire", sample_store, sample_index, 5)
        assert result.pairs() == [("tall", 1)]

    def test_higher_score_ranks_first(
        self,
        sample_store: store.SkillStore,
        sample_index: index.TriggerIndex,
    ) -> None:
        """More matching terms outrank earlier matches."""
        result = matcher.match(
            "session on laravel sail with docker", sample_store, sample_index, 5
        )
        assert result.pairs() == [("sail", 3), ("tall", 1)]

    def test_zero_score_skills_excluded(
        self,
        sample_store: store.SkillStore,
        sample_index: index.TriggerIndex,
    ) -> None:
        """Skills with no hits never appear, even under a large limit."""
        result = matcher.match("laravel", sample_store, sample_index, 10)
        assert result.ids() == ["sail"]

    def test_full_tie_breaks_by_id(self) -> None:
        """Equal score and first hit fall back to id order."""
        skill_store, skill_index = _build(
            [
                {"id": "b", "name": "B", "description": "queue workers"},
                {"id": "a", "name": "A", "description": "queue jobs"},
            ]
        )
        result = matcher.match("queue", skill_store, skill_index, 5)
        assert result.ids() == ["a", "b"]

    def test_earlier_hit_breaks_score_tie(self) -> None:
        """With equal scores, the skill matched earlier in the query ranks first."""
        skill_store, skill_index = _build(
            [
                {"id": "a", "name": "A", "description": "deployment"},
                {"id": "z", "name": "Z", "description": "migrations"},
            ]
        )
        result = matcher.match("migrations before deployment", skill_store, skill_index, 5)
        assert result.ids() == ["z", "a"]

    def test_custom_weights(
        self,
        sample_store: store.SkillStore,
        sample_index: index.TriggerIndex,
    ) -> None:
        """Scores follow the supplied weights."""
        weights = matcher.ScoringWeights(term=3, phrase=5)
        result = matcher.match(
            "tailwind styling", sample_store, sample_index, 5, weights=weights
        )
        assert result.pairs() == [("tall", 11)]

    def test_match_carries_record_fields(
        self,
        sample_store: store.SkillStore,
        sample_index: index.TriggerIndex,
    ) -> None:
        """Each match exposes id, name, description and score."""
        result = matcher.match("laravel sail", sample_store, sample_index, 5)
        assert result.to_list() == [
            {
                "id": "sail",
                "name": "Laravel Sail",
                "description": sample_store.get("sail").description,
                "score": 2,
            }
        ]


class TestEmptyResults:
    """Queries that match nothing."""

    @_pytest.mark.parametrize(
        "query",
        ["", "   ", "the of and", "unrelated gibberish xyz", "!!! ???"],
    )
    def test_no_matches(
        self,
        query: str,
        sample_store: store.SkillStore,
        sample_index: index.TriggerIndex,
    ) -> None:
        """Empty, stop-word-only and unknown queries give an empty result."""
        result = matcher.match(query, sample_store, sample_index, 5)
        assert len(result) == 0
        assert result.ids() == []
        assert not result

    def test_empty_store(self) -> None:
        """Nothing matches against an empty store."""
        skill_store, skill_index = _build([])
        assert len(matcher.match("livewire", skill_store, skill_index, 5)) == 0


class TestLimitValidation:
    """Tests for limit validation."""

    @_pytest.mark.parametrize("limit", [0, -1, True, 2.5, "3", None])
    def test_invalid_limit(
        self,
        limit: _typing.Any,
        sample_store: store.SkillStore,
        sample_index: index.TriggerIndex,
    ) -> None:
        """Non-positive or non-integer limits are rejected."""
        with _pytest.raises(errors.InvalidArgumentError):
            matcher.match("livewire", sample_store, sample_index, limit)

    def test_limit_checked_before_empty_query(
        self,
        sample_store: store.SkillStore,
        sample_index: index.TriggerIndex,
    ) -> None:
        """An invalid limit is rejected even when the query is empty."""
        with _pytest.raises(errors.InvalidArgumentError):
            matcher.match("", sample_store, sample_index, 0)


class TestDeterminism:
    """Repeated queries give identical results."""

    def test_same_query_same_result(
        self,
        sample_store: store.SkillStore,
        sample_index: index.TriggerIndex,
    ) -> None:
        """Identical inputs produce equal results every time."""
        query = "starting Livewire development session"
        results = [matcher.match(query, sample_store, sample_index, 5) for _ in range(5)]
        assert all(r == results[0] for r in results)

    def test_independent_rebuild_same_result(
        self, sample_records: list[dict[str, _typing.Any]]
    ) -> None:
        """Separately loaded stores rank identically."""
        query = "Tailwind styling for a Sail session"
        first = matcher.match(query, *_build(sample_records), 5)
        second = matcher.match(query, *_build(list(reversed(sample_records))), 5)
        assert first.pairs() == second.pairs()


class TestScoringWeights:
    """Tests for ScoringWeights."""

    def test_defaults(self) -> None:
        """Terms score 1 and phrases 2 by default."""
        weights = matcher.ScoringWeights()
        assert (weights.term, weights.phrase) == (1, 2)

    @_pytest.mark.parametrize("kwargs", [{"term": 0}, {"phrase": 0}, {"term": -1}])
    def test_non_positive_weights_rejected(self, kwargs: dict[str, int]) -> None:
        """Weights must be positive."""
        with _pytest.raises(errors.InvalidArgumentError):
            matcher.ScoringWeights(**kwargs)
