# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Subtype validation over canonical identities.

Every `sub` declaration naming a supertype is checked for:
- ordering: the supertype is declared strictly earlier (a self or forward
  supertype that loops back is diagnosed as a cycle),
- finality: the supertype is not final,
- structure (invariant policy): same kind; func signatures position-wise
  identical; struct fields of the parent form an identical prefix; array
  elements identical including mutability.
Storage types compare by the canonical identity of referenced declarations, so
references into recursive groups compare correctly regardless of position.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, assert_never

from typesec.config import DEFAULT_CONFIG, ValidationConfig
from typesec.core.error_kinds import ErrorKind
from typesec.core.type_render import render_field, render_storage
from typesec.core.types_core import ArrayType, Declaration, FuncType, StructType
from typesec.report import DiagnosticReporter
from typesec.stage1.decl_table import DeclTable
from typesec.stage2.groups import GroupedTable
from typesec.stage3.canon import CanonTable, canon_field, canon_storage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubtypeLattice:
	"""Validated supertype forest (`parent[i]` is None for roots and unchecked decls)."""

	parent: tuple[Optional[int], ...]
	canon: CanonTable

	def parent_of(self, index: int) -> Optional[int]:
		return self.parent[index]

	def ancestors(self, index: int) -> tuple[int, ...]:
		"""Supertype chain of `index`, nearest first."""
		out: list[int] = []
		cur = self.parent[index]
		while cur is not None:
			out.append(cur)
			cur = self.parent[cur]
		return tuple(out)

	def depth(self, index: int) -> int:
		return len(self.ancestors(index))

	def children(self, index: int) -> tuple[int, ...]:
		return tuple(i for i, p in enumerate(self.parent) if p == index)

	def is_subtype(self, sub: int, sup: int) -> bool:
		"""
		Declared (reflexive, transitive) subtyping, modulo canonical identity.

		`sub <: sup` holds when `sub` or one of its declared ancestors is
		iso-recursively equal to `sup`.
		"""
		target = self.canon.id_of(sup)
		if target is None or self.canon.id_of(sub) is None:
			return False
		for idx in (sub, *self.ancestors(sub)):
			if self.canon.id_of(idx) == target:
				return True
		return False


def check_subtypes(
	grouped: GroupedTable,
	canon: CanonTable,
	reporter: DiagnosticReporter,
	config: ValidationConfig = DEFAULT_CONFIG,
) -> SubtypeLattice:
	"""Validate every declared supertype edge and build the subtype forest."""
	table = grouped.table
	parent: list[Optional[int]] = [None] * len(table)
	for decl in table.decls:
		i = decl.index
		if not decl.sub or decl.supertype is None:
			continue
		if reporter.is_tainted(i):
			continue
		j = decl.supertype.index
		assert j is not None  # unresolved supertypes were tainted by stage1
		if j >= i:
			cycle = _supertype_cycle(table, i)
			if cycle is not None:
				path = " -> ".join(str(k) for k in cycle)
				reporter.error(
					ErrorKind.CYCLIC_SUPERTYPE,
					decl,
					f"supertype chain loops back to itself ({path})",
				)
			else:
				reporter.error(
					ErrorKind.FORWARD_SUPERTYPE,
					decl,
					f"supertype {table[j].label()} is not declared before this type",
					notes=["a supertype must precede its subtypes in declaration order"],
				)
			continue
		if reporter.is_tainted(j):
			reporter.skip(i, j)
			continue
		sup = table[j]
		if sup.effective_final(config.implicit_final):
			notes = [] if sup.sub else ["types without a `sub` clause are final"]
			reporter.error(
				ErrorKind.FINAL_TYPE_SUBTYPED,
				decl,
				f"cannot declare a subtype of final {sup.label()}",
				notes=notes,
			)
			continue
		mismatch = structural_mismatch(decl, sup, canon)
		if mismatch is not None:
			reporter.error(
				ErrorKind.INCOMPATIBLE_SUBTYPE,
				decl,
				f"not a structural subtype of {sup.label()}: {mismatch}",
			)
			continue
		parent[i] = j

	lattice = SubtypeLattice(parent=tuple(parent), canon=canon)
	logger.debug("subtype forest: %d edges", sum(1 for p in parent if p is not None))
	return lattice


def _supertype_cycle(table: DeclTable, start: int) -> Optional[list[int]]:
	"""Follow declared supertypes from `start`; return the loop path if it comes back."""
	path = [start]
	seen = {start}
	cur = start
	while True:
		decl = table[cur]
		if not decl.sub or decl.supertype is None:
			return None
		nxt = decl.supertype.index
		if nxt is None or not 0 <= nxt < len(table):
			return None
		path.append(nxt)
		if nxt == start:
			return path
		if nxt in seen:
			# Loop that does not pass through `start`; it is reported on its own members.
			return None
		seen.add(nxt)
		cur = nxt


def structural_mismatch(sub: Declaration, sup: Declaration, canon: CanonTable) -> Optional[str]:
	"""Describe the first structural incompatibility of `sub` against `sup`, or None."""
	a, b = sub.composite, sup.composite
	if isinstance(b, FuncType):
		if not isinstance(a, FuncType):
			return f"{sub.kind} type cannot subtype a func type"
		if len(a.params) != len(b.params):
			return f"expected {len(b.params)} parameter(s), found {len(a.params)}"
		if len(a.results) != len(b.results):
			return f"expected {len(b.results)} result(s), found {len(a.results)}"
		for k, (x, y) in enumerate(zip(a.params, b.params)):
			if canon_storage(x, canon) != canon_storage(y, canon):
				return f"parameter {k} is {render_storage(x)}, expected {render_storage(y)}"
		for k, (x, y) in enumerate(zip(a.results, b.results)):
			if canon_storage(x, canon) != canon_storage(y, canon):
				return f"result {k} is {render_storage(x)}, expected {render_storage(y)}"
		return None
	if isinstance(b, StructType):
		if not isinstance(a, StructType):
			return f"{sub.kind} type cannot subtype a struct type"
		if len(a.fields) < len(b.fields):
			return f"drops inherited field(s): has {len(a.fields)}, supertype has {len(b.fields)}"
		for k, (x, y) in enumerate(zip(a.fields, b.fields)):
			if canon_field(x, canon) != canon_field(y, canon):
				return f"field {k} is {render_field(x)}, expected {render_field(y)}"
		return None
	if isinstance(b, ArrayType):
		if not isinstance(a, ArrayType):
			return f"{sub.kind} type cannot subtype an array type"
		x, y = a.element, b.element
		if canon_storage(x.storage, canon) != canon_storage(y.storage, canon):
			return f"element is {render_field(x)}, expected {render_field(y)}"
		if x.mutable and not y.mutable:
			return "immutable element cannot be widened to mutable"
		if y.mutable and not x.mutable:
			return "mutable element cannot be made immutable"
		return None
	assert_never(b)


__all__ = ["SubtypeLattice", "check_subtypes", "structural_mismatch"]
