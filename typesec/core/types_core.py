# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Type core shared by every validation stage.

Declarations live in one flat table and refer to each other only through
TypeRef (symbolic name or positional index), never through object pointers,
so recursive groups need no cyclic ownership. The composite payload is a closed
union of exactly three shapes (func/struct/array); consumers match it
exhaustively and end with `assert_never`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Iterator, Optional, Union, assert_never

from .span import Span


class NumType(Enum):
	"""Numeric and vector value types."""

	I32 = "i32"
	I64 = "i64"
	F32 = "f32"
	F64 = "f64"
	V128 = "v128"


class PackedType(Enum):
	"""Packed storage types (struct fields / array elements only)."""

	I8 = "i8"
	I16 = "i16"


class AbsHeapType(Enum):
	"""Abstract heap types usable in reference types."""

	FUNC = "func"
	EXTERN = "extern"
	ANY = "any"
	EQ = "eq"
	I31 = "i31"
	STRUCT = "struct"
	ARRAY = "array"
	NONE = "none"
	NOFUNC = "nofunc"
	NOEXTERN = "noextern"
	EXN = "exn"
	NOEXN = "noexn"


@dataclass(frozen=True)
class TypeRef:
	"""
	Lexical reference to another declaration.

	Raw references carry either `name` (symbolic, e.g. "$node") or `index`
	(positional). Stage1 fills `index` for every symbolic reference it can bind;
	`name` is kept for messages.
	"""

	name: Optional[str] = None
	index: Optional[int] = None
	span: Span = field(default_factory=Span, compare=False)

	def __post_init__(self) -> None:
		if self.name is None and self.index is None:
			raise ValueError("TypeRef needs a name or an index")

	def with_index(self, index: int) -> "TypeRef":
		return replace(self, index=index)

	def describe(self) -> str:
		if self.name is not None:
			return self.name
		return str(self.index)


HeapType = Union[AbsHeapType, TypeRef]


@dataclass(frozen=True)
class RefType:
	"""`(ref null? heap)`."""

	heap: HeapType
	nullable: bool = True


ValType = Union[NumType, RefType]
StorageType = Union[NumType, RefType, PackedType]


@dataclass(frozen=True)
class FieldType:
	"""Storage type plus mutability (struct field or array element)."""

	storage: StorageType
	mutable: bool = False


@dataclass(frozen=True)
class FuncType:
	params: tuple[ValType, ...] = ()
	results: tuple[ValType, ...] = ()


@dataclass(frozen=True)
class StructType:
	fields: tuple[FieldType, ...] = ()


@dataclass(frozen=True)
class ArrayType:
	element: FieldType


CompositeType = Union[FuncType, StructType, ArrayType]


def composite_kind(comp: CompositeType) -> str:
	"""Return the kind tag (`func`, `struct`, `array`) of a composite type."""
	if isinstance(comp, FuncType):
		return "func"
	if isinstance(comp, StructType):
		return "struct"
	if isinstance(comp, ArrayType):
		return "array"
	assert_never(comp)


def storage_ref(st: StorageType) -> Optional[TypeRef]:
	"""Return the declaration reference inside a storage type, if any."""
	if isinstance(st, RefType) and isinstance(st.heap, TypeRef):
		return st.heap
	return None


def iter_refs(comp: CompositeType) -> Iterator[TypeRef]:
	"""Yield every declaration reference in a composite payload, in order."""
	for st in _iter_storage(comp):
		ref = storage_ref(st)
		if ref is not None:
			yield ref


def _iter_storage(comp: CompositeType) -> Iterator[StorageType]:
	if isinstance(comp, FuncType):
		yield from comp.params
		yield from comp.results
	elif isinstance(comp, StructType):
		for f in comp.fields:
			yield f.storage
	elif isinstance(comp, ArrayType):
		yield comp.element.storage
	else:
		assert_never(comp)


def map_refs(comp: CompositeType, fn: Callable[[TypeRef], TypeRef]) -> CompositeType:
	"""Return `comp` with every declaration reference replaced by `fn(ref)`."""

	def _st(st: StorageType) -> StorageType:
		if isinstance(st, RefType) and isinstance(st.heap, TypeRef):
			return RefType(heap=fn(st.heap), nullable=st.nullable)
		return st

	def _fld(f: FieldType) -> FieldType:
		return FieldType(storage=_st(f.storage), mutable=f.mutable)

	if isinstance(comp, FuncType):
		return FuncType(
			params=tuple(_st(p) for p in comp.params),  # type: ignore[misc]
			results=tuple(_st(r) for r in comp.results),  # type: ignore[misc]
		)
	if isinstance(comp, StructType):
		return StructType(fields=tuple(_fld(f) for f in comp.fields))
	if isinstance(comp, ArrayType):
		return ArrayType(element=_fld(comp.element))
	assert_never(comp)


@dataclass(frozen=True)
class Declaration:
	"""
	One resolved type declaration in the Declaration Table.

	`sub` records whether an explicit `sub` clause was present; `final` is only
	meaningful together with it (`sub final`). Bare declarations get their
	finality from the validation config.
	"""

	index: int
	composite: CompositeType
	name: Optional[str] = None
	supertype: Optional[TypeRef] = None
	sub: bool = False
	final: bool = False
	span: Span = field(default_factory=Span, compare=False)

	@property
	def kind(self) -> str:
		return composite_kind(self.composite)

	def references(self) -> Iterator[TypeRef]:
		"""Payload references followed by the supertype reference (if any)."""
		yield from iter_refs(self.composite)
		if self.supertype is not None:
			yield self.supertype

	def effective_final(self, implicit_final: bool) -> bool:
		if self.sub:
			return self.final
		return implicit_final

	def label(self) -> str:
		if self.name:
			return f"type {self.index} ({self.name})"
		return f"type {self.index}"


NUM_TYPES_BY_NAME: dict[str, NumType] = {t.value: t for t in NumType}
PACKED_TYPES_BY_NAME: dict[str, PackedType] = {t.value: t for t in PackedType}
ABS_HEAP_TYPES_BY_NAME: dict[str, AbsHeapType] = {t.value: t for t in AbsHeapType}


__all__ = [
	"NumType",
	"PackedType",
	"AbsHeapType",
	"TypeRef",
	"HeapType",
	"RefType",
	"ValType",
	"StorageType",
	"FieldType",
	"FuncType",
	"StructType",
	"ArrayType",
	"CompositeType",
	"Declaration",
	"composite_kind",
	"storage_ref",
	"iter_refs",
	"map_refs",
	"NUM_TYPES_BY_NAME",
	"PACKED_TYPES_BY_NAME",
	"ABS_HEAP_TYPES_BY_NAME",
]
