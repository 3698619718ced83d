# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
typesec driver: pipeline orchestration and CLI.

RawModule -> DeclTable (stage1)
   -> GroupedTable (stage2) + taint propagation along references
   -> CanonTable (stage3)
   -> SubtypeLattice (stage4)

One DiagnosticReporter is threaded through every stage. The result carries a
ValidatedTable only when no diagnostics were produced.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from typesec.config import DEFAULT_CONFIG, ValidationConfig, load_config_json
from typesec.core.diagnostics import Diagnostic, SkippedDecl
from typesec.report import (
	DiagnosticReporter,
	diag_to_json,
	format_diagnostic,
	format_skipped,
	skipped_to_json,
)
from typesec.stage0.loader import ModuleFormatError, load_module_json
from typesec.stage0.raw import RawModule
from typesec.stage1.decl_table import DeclTable, build_decl_table
from typesec.stage2.groups import GroupedTable, partition_groups
from typesec.stage3.canon import CanonicalId, CanonTable, canonicalize
from typesec.stage4.subtyping import SubtypeLattice, check_subtypes

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_INPUT = 2


@dataclass(frozen=True)
class ValidatedTable:
	"""Fully resolved, canonicalized and subtype-checked type section."""

	grouped: GroupedTable
	canon: CanonTable
	lattice: SubtypeLattice

	@property
	def table(self) -> DeclTable:
		return self.grouped.table

	def canonical_id(self, index: int) -> CanonicalId:
		cid = self.canon.id_of(index)
		assert cid is not None
		return cid


@dataclass(frozen=True)
class ValidationResult:
	table: Optional[ValidatedTable]
	diagnostics: tuple[Diagnostic, ...]
	skipped: tuple[SkippedDecl, ...]

	@property
	def ok(self) -> bool:
		return not self.diagnostics


def validate_module(module: RawModule, config: ValidationConfig = DEFAULT_CONFIG) -> ValidationResult:
	"""Run every stage over `module` and collect all diagnostics."""
	reporter = DiagnosticReporter()
	table = build_decl_table(module, reporter)
	grouped = partition_groups(table, reporter)
	reporter.propagate(grouped.reference_edges())
	canon = canonicalize(grouped, reporter, config)
	lattice = check_subtypes(grouped, canon, reporter, config)
	# Subtype failures taint their users too, not only their subtypes.
	reporter.propagate(grouped.reference_edges())
	report = reporter.finish(report_skipped=config.report_skipped, max_diagnostics=config.max_diagnostics)
	logger.info(
		"validated %d types in %d groups: %d diagnostic(s), %d skipped",
		len(table),
		len(grouped.groups),
		len(report.diagnostics),
		len(report.skipped),
	)
	validated = None
	if not report.diagnostics:
		validated = ValidatedTable(grouped=grouped, canon=canon, lattice=lattice)
	return ValidationResult(table=validated, diagnostics=report.diagnostics, skipped=report.skipped)


def _configure_logging(verbosity: int) -> None:
	"""Set up the `typesec` logger: 0 -> WARNING, 1 -> INFO, 2+ -> DEBUG."""
	level = logging.WARNING
	if verbosity == 1:
		level = logging.INFO
	elif verbosity >= 2:
		level = logging.DEBUG
	root = logging.getLogger("typesec")
	if not root.handlers:
		handler = logging.StreamHandler(sys.stderr)
		handler.setFormatter(logging.Formatter(fmt="[%(levelname)-5.5s] %(name)s: %(message)s"))
		root.addHandler(handler)
	root.setLevel(level)


def _classes_to_json(result: ValidationResult) -> list[dict]:
	if result.table is None:
		return []
	return [
		{"id": cid.short(), "members": list(members)}
		for cid, members in result.table.canon.classes().items()
	]


def main(argv: list[str] | None = None) -> int:
	"""
	Validate a JSON type section.

	With --json, prints structured diagnostics plus an exit_code; otherwise
	prints human-readable messages to stderr and a summary line to stdout.
	"""
	parser = argparse.ArgumentParser(prog="typesec", description="Validate recursive type groups and subtype declarations")
	parser.add_argument("source", type=Path, help="Path to a typesec-module JSON file")
	parser.add_argument("--config", type=Path, help="Path to a typesec-config JSON file")
	parser.add_argument(
		"--strict-final",
		dest="implicit_final",
		action="store_const",
		const=True,
		default=None,
		help="Treat declarations without a `sub` clause as final",
	)
	parser.add_argument(
		"--no-skipped",
		dest="report_skipped",
		action="store_const",
		const=False,
		default=None,
		help="Do not list declarations skipped because of earlier errors",
	)
	parser.add_argument("--max-diagnostics", type=int, default=None, help="Stop reporting after N diagnostics")
	parser.add_argument("--json", action="store_true", help="Emit diagnostics as JSON")
	parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (-v, -vv)")
	args = parser.parse_args(argv)

	_configure_logging(args.verbose)

	try:
		config = load_config_json(args.config) if args.config is not None else DEFAULT_CONFIG
		config = config.with_overrides(
			implicit_final=args.implicit_final,
			report_skipped=args.report_skipped,
			max_diagnostics=args.max_diagnostics,
		)
		module = load_module_json(args.source)
	except (OSError, ModuleFormatError, ValueError) as err:
		if args.json:
			payload = {
				"exit_code": EXIT_INPUT,
				"diagnostics": [
					{"phase": "load", "code": None, "decl_index": None, "message": str(err), "severity": "error", "file": str(args.source), "line": None, "column": None, "notes": []}
				],
				"skipped": [],
				"classes": [],
			}
			print(json.dumps(payload))
		else:
			print(f"{args.source}: error: {err}", file=sys.stderr)
		return EXIT_INPUT

	result = validate_module(module, config)
	exit_code = EXIT_OK if result.ok else EXIT_INVALID

	if args.json:
		payload = {
			"exit_code": exit_code,
			"diagnostics": [diag_to_json(d, args.source) for d in result.diagnostics],
			"skipped": [skipped_to_json(s) for s in result.skipped],
			"classes": _classes_to_json(result),
		}
		print(json.dumps(payload))
		return exit_code

	for diag in result.diagnostics:
		print(format_diagnostic(diag), file=sys.stderr)
	for entry in result.skipped:
		print(format_skipped(entry), file=sys.stderr)
	if result.ok:
		assert result.table is not None
		n = len(result.table.table)
		print(f"{args.source}: ok ({n} types, {len(result.table.canon.classes())} distinct)")
	else:
		print(f"{args.source}: {len(result.diagnostics)} error(s)")
	return exit_code


__all__ = ["ValidatedTable", "ValidationResult", "validate_module", "main"]
