# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json

import pytest

from typesec.config import DEFAULT_CONFIG, ValidationConfig, config_from_obj, load_config_json


def test_defaults_leave_bare_declarations_open() -> None:
	assert DEFAULT_CONFIG.implicit_final is False
	assert DEFAULT_CONFIG.report_skipped is True
	assert DEFAULT_CONFIG.max_diagnostics is None


def test_config_from_obj_reads_known_keys() -> None:
	cfg = config_from_obj({"format": "typesec-config", "version": 0, "implicit_final": True, "max_diagnostics": 3})
	assert cfg == ValidationConfig(implicit_final=True, report_skipped=True, max_diagnostics=3)


@pytest.mark.parametrize(
	"obj, message",
	[
		([], "JSON object"),
		({"format": "other", "version": 0}, "format/version"),
		({"format": "typesec-config", "version": 0, "colour": 1}, "unknown config keys: colour"),
		({"format": "typesec-config", "version": 0, "implicit_final": "yes"}, "booleans"),
		({"format": "typesec-config", "version": 0, "max_diagnostics": True}, "integer or null"),
		({"format": "typesec-config", "version": 0, "max_diagnostics": 0}, "positive"),
	],
)
def test_config_from_obj_rejects_malformed(obj, message) -> None:
	with pytest.raises(ValueError, match=message):
		config_from_obj(obj)


def test_with_overrides_ignores_none() -> None:
	cfg = DEFAULT_CONFIG.with_overrides(implicit_final=None, report_skipped=False)
	assert cfg.implicit_final is False
	assert cfg.report_skipped is False


def test_load_config_json(tmp_path) -> None:
	path = tmp_path / "typesec.json"
	path.write_text(json.dumps({"format": "typesec-config", "version": 0, "report_skipped": False}), encoding="utf-8")
	assert load_config_json(path).report_skipped is False
