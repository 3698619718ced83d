# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from pathlib import Path

from typesec.driver import EXIT_INPUT, EXIT_INVALID, EXIT_OK, main


def _write_module(tmp_path: Path, types: list) -> Path:
	path = tmp_path / "types.json"
	path.write_text(json.dumps({"format": "typesec-module", "version": 0, "types": types}), encoding="utf-8")
	return path


def test_cli_valid_module_json_output(tmp_path, capsys):
	path = _write_module(
		tmp_path,
		[
			{"name": "$A", "func": {}},
			{"name": "$B", "func": {}},
			{"name": "$C", "sub": True, "supertype": "$A", "func": {}},
		],
	)
	exit_code = main([str(path), "--json"])
	payload = json.loads(capsys.readouterr().out)
	assert exit_code == EXIT_OK
	assert payload["exit_code"] == 0
	assert payload["diagnostics"] == []
	assert [c["members"] for c in payload["classes"]] == [[0, 1], [2]]


def test_cli_reports_final_subtype(tmp_path, capsys):
	path = _write_module(
		tmp_path,
		[
			{"name": "$A", "sub": True, "final": True, "func": {}, "loc": {"line": 1, "column": 1}},
			{"name": "$B", "sub": True, "supertype": "$A", "func": {}, "loc": {"line": 2, "column": 1}},
		],
	)
	exit_code = main([str(path), "--json"])
	payload = json.loads(capsys.readouterr().out)
	assert exit_code == EXIT_INVALID
	(diag,) = payload["diagnostics"]
	assert diag["code"] == "FinalTypeSubtyped"
	assert diag["decl_index"] == 1
	assert diag["line"] == 2
	assert diag["file"] == str(path)


def test_cli_human_output(tmp_path, capsys):
	path = _write_module(tmp_path, [{"struct": {"fields": [{"type": {"ref": "$gone"}}]}}, {"array": {"type": {"ref": 0}}}])
	exit_code = main([str(path)])
	out, err = capsys.readouterr()
	assert exit_code == EXIT_INVALID
	assert "error[UnresolvedReference]: type 0: unknown type name $gone" in err
	assert "type 1: skipped due to prior error (type 0)" in err
	assert "1 error(s)" in out


def test_cli_strict_final_flag(tmp_path, capsys):
	path = _write_module(tmp_path, [{"func": {}}, {"sub": True, "supertype": 0, "func": {}}])
	assert main([str(path)]) == EXIT_OK
	capsys.readouterr()
	assert main([str(path), "--strict-final"]) == EXIT_INVALID


def test_cli_config_file(tmp_path, capsys):
	path = _write_module(tmp_path, [{"func": {}}, {"sub": True, "supertype": 0, "func": {}}])
	cfg = tmp_path / "cfg.json"
	cfg.write_text(json.dumps({"format": "typesec-config", "version": 0, "implicit_final": True}), encoding="utf-8")
	assert main([str(path), "--config", str(cfg)]) == EXIT_INVALID


def test_cli_malformed_input_exit_code(tmp_path, capsys):
	path = tmp_path / "bad.json"
	path.write_text(json.dumps({"format": "typesec-module", "version": 0, "types": [{"func": {"params": ["i8"]}}]}), encoding="utf-8")
	assert main([str(path), "--json"]) == EXIT_INPUT
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == EXIT_INPUT
	assert "packed type i8" in payload["diagnostics"][0]["message"]


def test_cli_missing_file(tmp_path, capsys):
	assert main([str(tmp_path / "nope.json")]) == EXIT_INPUT
	assert "error" in capsys.readouterr().err
