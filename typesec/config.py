# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Validation configuration.

Pinned policy:
- bare declarations (no `sub` clause) are open unless `implicit_final` is set,
- skipped declarations are reported alongside diagnostics unless disabled,
- `max_diagnostics` truncates the report (None = unlimited).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional

CONFIG_FORMAT = "typesec-config"
CONFIG_VERSION = 0


@dataclass(frozen=True)
class ValidationConfig:
	implicit_final: bool = False
	report_skipped: bool = True
	max_diagnostics: Optional[int] = None

	def __post_init__(self) -> None:
		if self.max_diagnostics is not None and self.max_diagnostics < 1:
			raise ValueError("max_diagnostics must be a positive integer")

	def with_overrides(self, **changes: Any) -> "ValidationConfig":
		"""Return a copy with the non-None entries of `changes` applied."""
		return replace(self, **{k: v for k, v in changes.items() if v is not None})


DEFAULT_CONFIG = ValidationConfig()


def config_from_obj(obj: Any) -> ValidationConfig:
	"""
	Build a ValidationConfig from a decoded JSON object.

	Format (pinned for v0, JSON):
	{
	  "format": "typesec-config",
	  "version": 0,
	  "implicit_final": false,      // optional
	  "report_skipped": true,       // optional
	  "max_diagnostics": null       // optional, positive int
	}
	"""
	if not isinstance(obj, Mapping):
		raise ValueError("config must be a JSON object")
	if obj.get("format") != CONFIG_FORMAT or obj.get("version") != CONFIG_VERSION:
		raise ValueError("unsupported config format/version")
	known = {"format", "version", "implicit_final", "report_skipped", "max_diagnostics"}
	unknown = sorted(set(obj) - known)
	if unknown:
		raise ValueError(f"unknown config keys: {', '.join(unknown)}")
	implicit_final = obj.get("implicit_final", False)
	report_skipped = obj.get("report_skipped", True)
	max_diags = obj.get("max_diagnostics")
	if not isinstance(implicit_final, bool) or not isinstance(report_skipped, bool):
		raise ValueError("implicit_final/report_skipped must be booleans")
	if max_diags is not None and (isinstance(max_diags, bool) or not isinstance(max_diags, int)):
		raise ValueError("max_diagnostics must be an integer or null")
	return ValidationConfig(
		implicit_final=implicit_final,
		report_skipped=report_skipped,
		max_diagnostics=max_diags,
	)


def load_config_json(path: Path) -> ValidationConfig:
	"""Load a config file (see `config_from_obj` for the format)."""
	return config_from_obj(json.loads(path.read_text(encoding="utf-8")))


__all__ = ["ValidationConfig", "DEFAULT_CONFIG", "config_from_obj", "load_config_json"]
