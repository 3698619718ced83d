# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Raw type-section input handed over by the external parser/loader.

A RawModule is an ordered list of groups. Declarations written inside a `rec`
bracket form one explicit group; every other declaration is its own implicit
singleton group. References are still lexical (TypeRef by name or position).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Sequence

from typesec.core.span import Span
from typesec.core.types_core import CompositeType, FuncType, TypeRef, ValType


@dataclass(frozen=True)
class RawDecl:
	"""One declaration as written: payload, optional name, optional `sub` clause."""

	composite: CompositeType
	name: Optional[str] = None
	supertype: Optional[TypeRef] = None
	sub: bool = False
	final: bool = False
	span: Span = field(default_factory=Span, compare=False)

	def __post_init__(self) -> None:
		if not self.sub and (self.supertype is not None or self.final):
			raise ValueError("supertype/final require a `sub` clause")


@dataclass(frozen=True)
class RawRecGroup:
	"""A run of declarations sharing one recursion scope."""

	decls: tuple[RawDecl, ...]
	explicit: bool = True
	span: Span = field(default_factory=Span, compare=False)

	def __post_init__(self) -> None:
		if not self.explicit and len(self.decls) != 1:
			raise ValueError("implicit groups hold exactly one declaration")


@dataclass(frozen=True)
class RawModule:
	groups: tuple[RawRecGroup, ...] = ()
	source: Optional[str] = None

	@classmethod
	def from_items(cls, items: Iterable[RawDecl | Sequence[RawDecl]], *, source: Optional[str] = None) -> "RawModule":
		"""
		Build a module from a mix of bare declarations and declaration lists.

		A bare RawDecl becomes an implicit singleton group; a list/tuple becomes an
		explicit `rec` group.
		"""
		groups: list[RawRecGroup] = []
		for item in items:
			if isinstance(item, RawDecl):
				groups.append(RawRecGroup(decls=(item,), explicit=False))
			else:
				groups.append(RawRecGroup(decls=tuple(item), explicit=True))
		return cls(groups=tuple(groups), source=source)

	def iter_decls(self) -> Iterator[RawDecl]:
		for g in self.groups:
			yield from g.decls

	def group_sizes(self) -> tuple[int, ...]:
		"""Sizes of the non-empty groups, in order (empty `rec` groups are dropped)."""
		return tuple(len(g.decls) for g in self.groups if g.decls)

	def decl_count(self) -> int:
		return sum(len(g.decls) for g in self.groups)

	def append_type(self, decl: RawDecl) -> "RawModule":
		"""Return a copy of this module with `decl` appended as a new singleton group."""
		group = RawRecGroup(decls=(decl,), explicit=False)
		return RawModule(groups=(*self.groups, group), source=self.source)


def make_func_decl(
	params: Sequence[ValType] = (),
	results: Sequence[ValType] = (),
	*,
	name: Optional[str] = None,
) -> RawDecl:
	"""Build a bare function-type declaration."""
	return RawDecl(composite=FuncType(params=tuple(params), results=tuple(results)), name=name)


__all__ = ["RawDecl", "RawRecGroup", "RawModule", "make_func_decl"]
