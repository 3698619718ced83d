# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Recursive-equivalence engine (iso-recursive canonical identities).

Groups are canonicalized bottom-up in group order. Inside a group, a reference
to a group member becomes `["rec", offset]` (offset relative to the group
start), and a reference to an earlier group becomes that target's already
final canonical identity. The ordered member shapes are rendered as canonical
JSON and hashed; a declaration's identity is `(group digest, position)`.

Consequences:
- identical groups declared at different table positions get the same digest,
- two declarations are equal iff their groups have equal size and
  position-wise identical shapes, and they sit at the same position,
- identities are stable across runs (no process-local interning).
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, assert_never

from typesec.config import DEFAULT_CONFIG, ValidationConfig
from typesec.core.types_core import (
	AbsHeapType,
	ArrayType,
	CompositeType,
	Declaration,
	FieldType,
	FuncType,
	NumType,
	PackedType,
	RefType,
	StorageType,
	StructType,
	TypeRef,
)
from typesec.report import DiagnosticReporter
from typesec.stage2.groups import Group, GroupedTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class CanonicalId:
	"""Equivalence-class token: digest of the defining group plus relative position."""

	group: str
	position: int

	def short(self) -> str:
		return f"{self.group[:12]}#{self.position}"

	def to_json(self) -> list[Any]:
		return ["canon", self.group, self.position]


def canonical_json_bytes(obj: Any) -> bytes:
	"""
	Render JSON deterministically.

	Rules:
	- UTF-8
	- no insignificant whitespace
	- stable key ordering
	"""
	return json.dumps(obj, sort_keys=True, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def sha256_hex(data: bytes) -> str:
	"""Return sha256 hex digest for `data`."""
	return hashlib.sha256(data).hexdigest()


@dataclass(frozen=True)
class CanonTable:
	"""Canonical identity per declaration (None where the declaration is tainted)."""

	ids: tuple[Optional[CanonicalId], ...]
	group_digests: tuple[Optional[str], ...]

	def id_of(self, index: int) -> Optional[CanonicalId]:
		return self.ids[index]

	def same(self, a: int, b: int) -> bool:
		"""True iff both declarations are canonicalized and iso-recursively equal."""
		ia, ib = self.ids[a], self.ids[b]
		return ia is not None and ia == ib

	def classes(self) -> dict[CanonicalId, tuple[int, ...]]:
		"""Equivalence classes in first-appearance order."""
		out: dict[CanonicalId, list[int]] = {}
		for idx, cid in enumerate(self.ids):
			if cid is not None:
				out.setdefault(cid, []).append(idx)
		return {cid: tuple(members) for cid, members in out.items()}

	def representative(self, index: int) -> Optional[int]:
		"""Lowest declaration index sharing `index`'s identity."""
		cid = self.ids[index]
		if cid is None:
			return None
		for idx, other in enumerate(self.ids):
			if other == cid:
				return idx
		return index


def _storage_shape(st: StorageType, ref_shape) -> Any:
	if isinstance(st, (NumType, PackedType)):
		return st.value
	if isinstance(st, RefType):
		heap = st.heap.value if isinstance(st.heap, AbsHeapType) else ref_shape(st.heap)
		return ["ref", st.nullable, heap]
	assert_never(st)


def _field_shape(f: FieldType, ref_shape) -> Any:
	return [_storage_shape(f.storage, ref_shape), f.mutable]


def composite_shape(comp: CompositeType, ref_shape) -> Any:
	"""Structural shape of a payload with references mapped through `ref_shape`."""
	if isinstance(comp, FuncType):
		return [
			"func",
			[_storage_shape(p, ref_shape) for p in comp.params],
			[_storage_shape(r, ref_shape) for r in comp.results],
		]
	if isinstance(comp, StructType):
		return ["struct", [_field_shape(f, ref_shape) for f in comp.fields]]
	if isinstance(comp, ArrayType):
		return ["array", _field_shape(comp.element, ref_shape)]
	assert_never(comp)


def decl_shape(decl: Declaration, group: Group, ids: list[Optional[CanonicalId]], *, implicit_final: bool) -> Any:
	"""Shape of one group member: finality, supertype and payload, references substituted."""

	def _ref(ref: TypeRef) -> Any:
		j = ref.index
		if j is None:
			raise ValueError(f"{decl.label()}: unresolved reference {ref.describe()}")
		if j in group:
			return ["rec", j - group.start]
		cid = ids[j]
		if cid is None:
			raise ValueError(f"{decl.label()}: reference to uncanonicalized type {j}")
		return cid.to_json()

	sup = _ref(decl.supertype) if decl.sub and decl.supertype is not None else None
	return {
		"final": decl.effective_final(implicit_final),
		"super": sup,
		"type": composite_shape(decl.composite, _ref),
	}


def group_digest(shapes: list[Any]) -> str:
	return sha256_hex(canonical_json_bytes(shapes))


def canonicalize(
	grouped: GroupedTable,
	reporter: DiagnosticReporter,
	config: ValidationConfig = DEFAULT_CONFIG,
) -> CanonTable:
	"""
	Assign a canonical identity to every untainted declaration.

	A group with any tainted member is not canonicalized: its identity depends
	on every member, so the remaining members are skipped with that cause.
	"""
	table = grouped.table
	ids: list[Optional[CanonicalId]] = [None] * len(table)
	digests: list[Optional[str]] = []
	for group in grouped.groups:
		blocked = next((i for i in group.members() if reporter.is_tainted(i)), None)
		if blocked is None:
			blocked = _first_blocked_target(grouped, group, ids)
		if blocked is not None:
			for i in group.members():
				if not reporter.is_tainted(i):
					reporter.skip(i, blocked)
			digests.append(None)
			continue
		shapes = [decl_shape(table[i], group, ids, implicit_final=config.implicit_final) for i in group.members()]
		digest = group_digest(shapes)
		for pos, i in enumerate(group.members()):
			ids[i] = CanonicalId(group=digest, position=pos)
		digests.append(digest)

	canon = CanonTable(ids=tuple(ids), group_digests=tuple(digests))
	logger.debug(
		"canonicalized %d/%d declarations into %d classes",
		sum(1 for c in ids if c is not None),
		len(ids),
		len(canon.classes()),
	)
	return canon


def _first_blocked_target(grouped: GroupedTable, group: Group, ids: list[Optional[CanonicalId]]) -> Optional[int]:
	# Cross-group targets must already carry an identity; a missing one means
	# the target was tainted after propagation ran.
	for i in group.members():
		for ref in grouped.table[i].references():
			j = ref.index
			if j is None or not 0 <= j < len(ids):
				return i
			if j not in group and ids[j] is None:
				return j
	return None


def canon_storage(st: StorageType, canon: CanonTable) -> Any:
	"""Hashable storage-type key with declaration references replaced by identities."""
	if isinstance(st, RefType) and isinstance(st.heap, TypeRef):
		j = st.heap.index
		return ("ref", st.nullable, canon.ids[j] if j is not None else None)
	if isinstance(st, RefType):
		return ("ref", st.nullable, st.heap)
	return st


def canon_field(f: FieldType, canon: CanonTable) -> Any:
	return (canon_storage(f.storage, canon), f.mutable)


__all__ = [
	"CanonicalId",
	"CanonTable",
	"canonicalize",
	"canonical_json_bytes",
	"sha256_hex",
	"composite_shape",
	"decl_shape",
	"group_digest",
	"canon_storage",
	"canon_field",
]
