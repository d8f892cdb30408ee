"""
Inverted trigger index: normalized term or phrase -> skill ids.

The index is derived from a SkillStore and never edited by hand. It is
built once per load and discarded on reload.
"""

from __future__ import annotations

import collections.abc as _abc
import hashlib as _hashlib
import json as _json
import types as _types
import typing as _typing

import skillregistry.skills.normalize as normalize
import skillregistry.skills.store as store_module

_EMPTY: frozenset[str] = frozenset()


class TriggerIndex:
    """
    Mapping from normalized trigger to the ids of skills that own it.

    Keys containing a space are multi-word phrases; all other keys are
    single terms. Keys are held in sorted order so that two indexes built
    from the same store serialize identically.
    """

    def __init__(
        self,
        buckets: _abc.Mapping[str, frozenset[str]],
        normalizer: normalize.TextNormalizer,
    ) -> None:
        self._buckets = _types.MappingProxyType(
            {key: frozenset(buckets[key]) for key in sorted(buckets)}
        )
        self._normalizer = normalizer
        self._phrase_lengths = tuple(
            sorted({len(key.split()) for key in self._buckets if normalize.is_phrase(key)})
        )

    @classmethod
    def build(cls, store: store_module.SkillStore) -> TriggerIndex:
        """
        Build the index for every record in store.

        Args:
            store: Loaded skill store.

        Returns:
            Index sharing the store's normalizer.
        """
        buckets: dict[str, set[str]] = {}
        for record in store.all():
            for trigger in record.triggers:
                buckets.setdefault(trigger, set()).add(record.id)
        return cls(
            {key: frozenset(ids) for key, ids in buckets.items()},
            store.normalizer,
        )

    @property
    def normalizer(self) -> normalize.TextNormalizer:
        """Normalizer used for triggers and lookups."""
        return self._normalizer

    @property
    def phrase_lengths(self) -> tuple[int, ...]:
        """Distinct term counts of stored phrases, ascending."""
        return self._phrase_lengths

    def lookup(self, term: str) -> frozenset[str]:
        """
        Ids of skills whose triggers include term.

        term is normalized first, so "Livewire" and "Alpine.js
        interactivity" are both valid inputs. Unknown terms give an
        empty set.
        """
        return self.get_key(self._normalizer.key(term))

    def get_key(self, key: str) -> frozenset[str]:
        """Ids for an already-normalized key."""
        return self._buckets.get(key, _EMPTY)

    def terms(self) -> list[str]:
        """Indexed single terms, sorted."""
        return [key for key in self._buckets if not normalize.is_phrase(key)]

    def phrases(self) -> list[str]:
        """Indexed multi-word phrases, sorted."""
        return [key for key in self._buckets if normalize.is_phrase(key)]

    def __contains__(self, key: object) -> bool:
        return key in self._buckets

    def __len__(self) -> int:
        return len(self._buckets)

    def to_dict(self) -> dict[str, list[str]]:
        """Serializable form: key -> sorted ids, keys sorted."""
        return {key: sorted(ids) for key, ids in self._buckets.items()}

    def fingerprint(self) -> str:
        """SHA-256 of the canonical JSON form of the index."""
        payload = _json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
        return _hashlib.sha256(payload.encode("utf-8")).hexdigest()

    def stats(self) -> dict[str, _typing.Any]:
        """Counts for display."""
        return {
            "keys": len(self._buckets),
            "terms": len(self.terms()),
            "phrases": len(self.phrases()),
            "phrase_lengths": list(self._phrase_lengths),
        }
