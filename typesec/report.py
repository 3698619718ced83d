# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Diagnostic reporter shared by the validation stages.

Validation never stops at the first error. A declaration that fails a rule is
*failed*; every declaration that depends on a failed one is *tainted* and gets
listed once in `skipped` (with the root cause) instead of collecting cascading
errors. Stages consult `is_tainted` before checking a declaration.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, Mapping, Optional

from typesec.core.diagnostics import Diagnostic, SkippedDecl
from typesec.core.error_kinds import PHASE_ORDER, ErrorKind
from typesec.core.types_core import Declaration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Report:
	"""Final, ordered output of a reporter."""

	diagnostics: tuple[Diagnostic, ...]
	skipped: tuple[SkippedDecl, ...]


class DiagnosticReporter:
	def __init__(self) -> None:
		self._diagnostics: list[Diagnostic] = []
		self._seen: set[tuple[object, ...]] = set()
		# decl index -> root cause index (a failed decl is its own root).
		self._taint: dict[int, int] = {}
		self._skipped: dict[int, SkippedDecl] = {}

	def error(
		self,
		kind: ErrorKind,
		decl: Declaration,
		message: str,
		*,
		notes: Optional[Iterable[str]] = None,
	) -> None:
		"""Record a rule violation on `decl` and mark it failed."""
		diag = Diagnostic(
			message=f"{decl.label()}: {message}",
			code=kind,
			decl_index=decl.index,
			span=decl.span,
			notes=list(notes or []),
		)
		key = diag.dedup_key()
		if key not in self._seen:
			self._seen.add(key)
			self._diagnostics.append(diag)
			logger.debug("%s on %s: %s", kind.value, decl.label(), message)
		# A decl previously only skipped becomes a root failure of its own.
		self._skipped.pop(decl.index, None)
		self._taint[decl.index] = decl.index

	def skip(self, index: int, cause: int) -> None:
		"""Withhold `index` from further checks because `cause` is tainted."""
		if index in self._taint:
			return
		root = self._taint.get(cause, cause)
		self._taint[index] = root
		self._skipped[index] = SkippedDecl(decl_index=index, cause_index=root)

	def is_tainted(self, index: int) -> bool:
		return index in self._taint

	def has_errors(self) -> bool:
		return bool(self._diagnostics)

	def propagate(self, edges: Mapping[int, Iterable[int]]) -> None:
		"""
		Taint every declaration that (transitively) references a tainted one.

		`edges` maps a declaration index to the indices it references.
		"""
		users: dict[int, list[int]] = {}
		for src, targets in edges.items():
			for dst in targets:
				users.setdefault(dst, []).append(src)
		work = deque(sorted(self._taint))
		while work:
			cur = work.popleft()
			for user in users.get(cur, ()):
				if user not in self._taint:
					self.skip(user, cur)
					work.append(user)

	def finish(self, *, report_skipped: bool = True, max_diagnostics: Optional[int] = None) -> Report:
		"""Return diagnostics ordered by declaration index then stage."""

		def _key(d: Diagnostic) -> tuple[int, int]:
			phase_rank = PHASE_ORDER.index(d.phase) if d.phase in PHASE_ORDER else len(PHASE_ORDER)
			return (d.decl_index if d.decl_index is not None else -1, phase_rank)

		diags = sorted(self._diagnostics, key=_key)
		if max_diagnostics is not None and len(diags) > max_diagnostics:
			dropped = len(diags) - max_diagnostics
			diags = diags[:max_diagnostics]
			last = diags[-1]
			diags[-1] = replace(last, notes=[*last.notes, f"{dropped} more diagnostic(s) suppressed"])
		skipped: tuple[SkippedDecl, ...] = ()
		if report_skipped:
			skipped = tuple(self._skipped[i] for i in sorted(self._skipped))
		return Report(diagnostics=tuple(diags), skipped=skipped)


def format_diagnostic(diag: Diagnostic) -> str:
	"""Render a diagnostic as `file:line:col: error[Kind]: message` plus note lines."""
	code = f"[{diag.code.value}]" if diag.code is not None else ""
	lines = [f"{diag.span.render()}: {diag.severity}{code}: {diag.message}"]
	lines.extend(f"  note: {n}" for n in diag.notes)
	return "\n".join(lines)


def format_skipped(entry: SkippedDecl) -> str:
	return f"type {entry.decl_index}: {entry.reason} (type {entry.cause_index})"


def diag_to_json(diag: Diagnostic, source: Optional[Path] = None) -> dict:
	"""Render a Diagnostic to a structured JSON-friendly dict."""
	file = diag.span.file
	if file is None and source is not None:
		file = str(source)
	return {
		"phase": diag.phase,
		"code": diag.code.value if diag.code is not None else None,
		"decl_index": diag.decl_index,
		"message": diag.message,
		"severity": diag.severity,
		"file": file,
		"line": diag.span.line,
		"column": diag.span.column,
		"notes": list(diag.notes),
	}


def skipped_to_json(entry: SkippedDecl) -> dict:
	return {"decl_index": entry.decl_index, "cause_index": entry.cause_index, "reason": entry.reason}


__all__ = [
	"DiagnosticReporter",
	"Report",
	"format_diagnostic",
	"format_skipped",
	"diag_to_json",
	"skipped_to_json",
]
