# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declaration Table construction (name binding).

Flattens the module's groups into declaration order, gives every declaration
its stable index and rewrites symbolic references to numeric ones. Names are
bound table-wide; whether a reference is *visible* from where it is used is the
group partitioner's business. No type-correctness checks happen here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from typesec.core.error_kinds import ErrorKind
from typesec.core.types_core import Declaration, TypeRef, map_refs
from typesec.report import DiagnosticReporter
from typesec.stage0.raw import RawModule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeclTable:
	"""Declarations in order plus the grouping annotation (sizes of consecutive runs)."""

	decls: tuple[Declaration, ...]
	group_sizes: tuple[int, ...]
	names: tuple[tuple[str, int], ...] = ()

	def __len__(self) -> int:
		return len(self.decls)

	def __getitem__(self, index: int) -> Declaration:
		return self.decls[index]

	def index_of(self, name: str) -> Optional[int]:
		for bound, idx in self.names:
			if bound == name:
				return idx
		return None


def build_decl_table(module: RawModule, reporter: DiagnosticReporter) -> DeclTable:
	"""
	Resolve every symbolic reference in `module` to a declaration index.

	Unbound names are reported as `UnresolvedReference`; the reference keeps
	`index=None` so later stages can tell it apart from a resolved one.
	"""
	if not isinstance(module, RawModule):
		raise TypeError(f"expected RawModule, got {type(module).__name__}")
	raw_decls = list(module.iter_decls())

	names: dict[str, int] = {}
	duplicates: list[tuple[int, str]] = []
	for idx, raw in enumerate(raw_decls):
		if raw.name is None:
			continue
		if raw.name in names:
			duplicates.append((idx, raw.name))
			continue
		names[raw.name] = idx

	decls: list[Declaration] = []
	for idx, raw in enumerate(raw_decls):
		unresolved: list[str] = []

		def _resolve(ref: TypeRef) -> TypeRef:
			if ref.index is not None or ref.name is None:
				return ref
			target = names.get(ref.name)
			if target is None:
				if ref.name not in unresolved:
					unresolved.append(ref.name)
				return ref
			return ref.with_index(target)

		comp = map_refs(raw.composite, _resolve)
		supertype = _resolve(raw.supertype) if raw.supertype is not None else None
		decl = Declaration(
			index=idx,
			composite=comp,
			name=raw.name,
			supertype=supertype,
			sub=raw.sub,
			final=raw.final,
			span=raw.span,
		)
		decls.append(decl)
		for name in unresolved:
			reporter.error(ErrorKind.UNRESOLVED_REFERENCE, decl, f"unknown type name {name}")

	for idx, name in duplicates:
		first = names[name]
		reporter.error(
			ErrorKind.DUPLICATE_TYPE_NAME,
			decls[idx],
			f"type name {name} is already bound",
			notes=[f"first bound by type {first}"],
		)

	logger.debug("declaration table: %d declarations, %d names", len(decls), len(names))
	return DeclTable(
		decls=tuple(decls),
		group_sizes=module.group_sizes(),
		names=tuple(sorted(names.items(), key=lambda kv: kv[1])),
	)


__all__ = ["DeclTable", "build_decl_table"]
