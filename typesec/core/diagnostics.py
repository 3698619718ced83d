# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for the validation stages.

A diagnostic names the offending declaration by its table index; the span is
whatever location the loader attached to that declaration.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .error_kinds import PHASE_BY_KIND, ErrorKind
from .span import Span


@dataclass
class Diagnostic:
	"""Represents a validation diagnostic (one rejected declaration, one rule)."""

	message: str
	code: ErrorKind | None = None
	decl_index: int | None = None
	# Stage label ("resolve", "group", "canon", "subtype"). Derived from `code`
	# when not given so JSON output is unambiguous.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()
		if self.phase is None and self.code is not None:
			self.phase = PHASE_BY_KIND.get(self.code)

	def dedup_key(self) -> tuple[object, ...]:
		return (self.code, self.decl_index, self.message)


@dataclass(frozen=True)
class SkippedDecl:
	"""A declaration withheld from further checks because something it depends on failed."""

	decl_index: int
	cause_index: int
	reason: str = "skipped due to prior error"


__all__ = ["Diagnostic", "SkippedDecl"]
