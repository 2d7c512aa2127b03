# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Coherence: at most one instance per (class, matching key).

The matching key of a type-head is the tuple of its outermost constructors,
one per class parameter, compared positionally. A bare type variable in a
position is a wildcard (`None` in the key). Two keys are

- equal: every position holds the same constructor (or both are wildcards),
  reported as `OverlappingInstance`;
- overlapping: not equal, but every position is equal or has a wildcard on at
  least one side, reported as `AmbiguousInstance`. No "most specific wins"
  rule is applied.

Nested arguments never participate: `Eq List<a>` and `Eq List<Int>` share
the key `(List/1,)` and overlap.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from tcres.core.span import Span
from tcres.core.type_keys import TypeHeadKey, TypeTerm

from .decls import InstanceDecl
from .errors import AmbiguousInstance, OverlappingInstance

MatchingKey = Tuple[Optional[TypeHeadKey], ...]


def matching_key(types: Tuple[TypeTerm, ...]) -> MatchingKey:
	return tuple(t.head() for t in types)


def has_wildcard(key: MatchingKey) -> bool:
	return any(h is None for h in key)


def keys_unify(a: MatchingKey, b: MatchingKey) -> bool:
	if len(a) != len(b):
		return False
	return all(x is None or y is None or x == y for x, y in zip(a, b))


def render_key(key: MatchingKey) -> str:
	return " ".join("_" if h is None else str(h) for h in key)


class CoherenceChecker:
	"""
	Accepted matching keys per class.

	`check` validates a candidate against everything accepted so far without
	recording it; `accept` records it. The registry calls `accept` only after
	default completion succeeded, so a rejected instance leaves no trace.
	"""

	def __init__(self) -> None:
		self._accepted: Dict[str, List[Tuple[MatchingKey, InstanceDecl]]] = {}

	def check(self, decl: InstanceDecl) -> MatchingKey:
		key = matching_key(decl.head)
		for other_key, other in self._accepted.get(decl.class_name, []):
			if other_key == key:
				raise OverlappingInstance(
					message=(
						f"overlapping instances for class '{decl.class_name}': "
						f"'{decl.label()}' conflicts with '{other.label()}'"
					),
					class_name=decl.class_name,
					type_heads=(decl.head_str(), other.head_str()),
					span=Span.from_loc(decl.loc),
					notes=[f"both instances have matching key '{render_key(key)}'"],
				)
			if keys_unify(other_key, key):
				raise AmbiguousInstance(
					message=(
						f"ambiguous instances for class '{decl.class_name}': "
						f"'{decl.label()}' and '{other.label()}' both apply to some types"
					),
					class_name=decl.class_name,
					type_heads=(decl.head_str(), other.head_str()),
					span=Span.from_loc(decl.loc),
					notes=[f"matching keys '{render_key(key)}' and '{render_key(other_key)}' unify through a wildcard"],
				)
		return key

	def accept(self, decl: InstanceDecl, key: MatchingKey) -> None:
		self._accepted.setdefault(decl.class_name, []).append((key, decl))


__all__ = ["MatchingKey", "matching_key", "has_wildcard", "keys_unify", "render_key", "CoherenceChecker"]
