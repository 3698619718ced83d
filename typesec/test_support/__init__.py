# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared builders for tests that need raw type sections.

These keep test data close to the text format:

	module(func(name="$a"), [struct(field(ref("$n")), name="$n")])

is `(type $a (func)) (rec (type $n (struct (field (ref null $n)))))`.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from typesec.config import DEFAULT_CONFIG, ValidationConfig
from typesec.core.types_core import (
	ABS_HEAP_TYPES_BY_NAME,
	NUM_TYPES_BY_NAME,
	PACKED_TYPES_BY_NAME,
	ArrayType,
	FieldType,
	FuncType,
	RefType,
	StorageType,
	StructType,
	TypeRef,
)
from typesec.driver import ValidationResult, validate_module
from typesec.stage0.raw import RawDecl, RawModule


def storage(x: Any) -> StorageType:
	"""Coerce "i32"/"i8"/RefType into a storage type."""
	if isinstance(x, str):
		if x in NUM_TYPES_BY_NAME:
			return NUM_TYPES_BY_NAME[x]
		if x in PACKED_TYPES_BY_NAME:
			return PACKED_TYPES_BY_NAME[x]
		raise ValueError(f"unknown storage type {x!r}")
	return x


def ref(target: Any, *, null: bool = True) -> RefType:
	"""`(ref null? target)`; target is "$name", an index or an abstract heap name."""
	if isinstance(target, str) and target in ABS_HEAP_TYPES_BY_NAME:
		return RefType(heap=ABS_HEAP_TYPES_BY_NAME[target], nullable=null)
	return RefType(heap=tref(target), nullable=null)


def tref(target: Any) -> TypeRef:
	if isinstance(target, int):
		return TypeRef(index=target)
	return TypeRef(name=target)


def field(st: Any, *, mut: bool = False) -> FieldType:
	return FieldType(storage=storage(st), mutable=mut)


def _sub_kwargs(sub: Any, final: bool) -> dict[str, Any]:
	# sub=True -> open `sub` clause without supertype; sub=<target> -> `sub <target>`.
	if sub is None or sub is False:
		if final:
			return {"sub": True, "final": True, "supertype": None}
		return {}
	if sub is True:
		return {"sub": True, "final": final, "supertype": None}
	return {"sub": True, "final": final, "supertype": tref(sub)}


def func(
	params: Sequence[Any] = (),
	results: Sequence[Any] = (),
	*,
	name: Optional[str] = None,
	sub: Any = None,
	final: bool = False,
) -> RawDecl:
	comp = FuncType(params=tuple(storage(p) for p in params), results=tuple(storage(r) for r in results))  # type: ignore[misc]
	return RawDecl(composite=comp, name=name, **_sub_kwargs(sub, final))


def struct(*fields: Any, name: Optional[str] = None, sub: Any = None, final: bool = False) -> RawDecl:
	flds = tuple(f if isinstance(f, FieldType) else field(f) for f in fields)
	return RawDecl(composite=StructType(fields=flds), name=name, **_sub_kwargs(sub, final))


def array(elem: Any, *, mut: bool = False, name: Optional[str] = None, sub: Any = None, final: bool = False) -> RawDecl:
	return RawDecl(composite=ArrayType(element=field(elem, mut=mut)), name=name, **_sub_kwargs(sub, final))


def module(*items: Any) -> RawModule:
	"""Bare RawDecls become singleton groups; lists become `rec` groups."""
	return RawModule.from_items(items)


def run(*items: Any, config: ValidationConfig = DEFAULT_CONFIG) -> ValidationResult:
	return validate_module(module(*items), config)


def codes(result: ValidationResult) -> list[str]:
	return [d.code.value for d in result.diagnostics if d.code is not None]


__all__ = ["storage", "ref", "tref", "field", "func", "struct", "array", "module", "run", "codes"]
