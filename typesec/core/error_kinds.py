# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Diagnostic kinds emitted by the type-section validation pass."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
	"""
	Kinds of validation failures.

	Values are the stable names used in JSON output and test expectations.
	"""

	UNRESOLVED_REFERENCE = "UnresolvedReference"
	DUPLICATE_TYPE_NAME = "DuplicateTypeName"
	UNKNOWN_TYPE_INDEX = "UnknownTypeIndex"
	FORWARD_REFERENCE_ACROSS_GROUPS = "ForwardReferenceAcrossGroups"
	INCOMPATIBLE_SUBTYPE = "IncompatibleSubtype"
	FINAL_TYPE_SUBTYPED = "FinalTypeSubtyped"
	CYCLIC_SUPERTYPE = "CyclicSupertype"
	FORWARD_SUPERTYPE = "ForwardSupertype"

	def __str__(self) -> str:
		return self.value


# Phase label per kind; also fixes the intra-declaration ordering of diagnostics.
PHASE_BY_KIND: dict[ErrorKind, str] = {
	ErrorKind.UNRESOLVED_REFERENCE: "resolve",
	ErrorKind.DUPLICATE_TYPE_NAME: "resolve",
	ErrorKind.UNKNOWN_TYPE_INDEX: "group",
	ErrorKind.FORWARD_REFERENCE_ACROSS_GROUPS: "group",
	ErrorKind.CYCLIC_SUPERTYPE: "subtype",
	ErrorKind.FORWARD_SUPERTYPE: "subtype",
	ErrorKind.FINAL_TYPE_SUBTYPED: "subtype",
	ErrorKind.INCOMPATIBLE_SUBTYPE: "subtype",
}

PHASE_ORDER: tuple[str, ...] = ("resolve", "group", "canon", "subtype")


__all__ = ["ErrorKind", "PHASE_BY_KIND", "PHASE_ORDER"]
