# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source span representation used by diagnostics.

The external parser/loader owns real source positions. A Span carries whatever
file/line/column it was handed, plus the raw location object so richer renderers
can still recover loader-specific details.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column plus raw loader loc)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	raw: Any = None

	@classmethod
	def from_loc(cls, loc: Any, *, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from a loader location.

		Accepts an existing Span (returned unchanged unless `file` fills a gap),
		a JSON-style mapping with `line`/`column` keys, or any object exposing
		`line`/`column` attributes.
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			if loc.file is None and file is not None:
				return cls(file=file, line=loc.line, column=loc.column, raw=loc.raw)
			return loc
		if isinstance(loc, Mapping):
			return cls(
				file=loc.get("file") or file,
				line=_opt_int(loc.get("line")),
				column=_opt_int(loc.get("column")),
				raw=loc,
			)
		return cls(
			file=getattr(loc, "file", None) or getattr(loc, "filename", None) or file,
			line=_opt_int(getattr(loc, "line", None)),
			column=_opt_int(getattr(loc, "column", None)),
			raw=loc,
		)

	def is_known(self) -> bool:
		return self.line is not None

	def render(self) -> str:
		"""Render as `file:line:col` (omitting unknown trailing parts)."""
		parts = [self.file or "<input>"]
		if self.line is not None:
			parts.append(str(self.line))
			if self.column is not None:
				parts.append(str(self.column))
		return ":".join(parts)


def _opt_int(value: Any) -> Optional[int]:
	if value is None or isinstance(value, bool):
		return None
	if isinstance(value, int):
		return value
	return None


__all__ = ["Span"]
