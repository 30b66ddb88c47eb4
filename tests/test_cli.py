import io
import sys

import pytest

from helmify.cli import main, print_version, read_flags

MANIFEST = """apiVersion: v1
kind: ConfigMap
metadata:
  name: my-app-config
data:
  foo: bar
"""


def test_read_flags_collects_options():
    config = read_flags(
        ["-v", "-crd-dir", "-f", "a.yaml", "-f", "dir", "-r", "-preserve-ns", "deploy/charts/mychart"]
    )
    assert config.verbose is True
    assert config.crd is True
    assert config.files == ["a.yaml", "dir"]
    assert config.files_recursively is True
    assert config.preserve_ns is True
    assert config.chart_name == "mychart"
    assert config.chart_dir == "deploy/charts"


def test_read_flags_defaults():
    config = read_flags([])
    assert config.chart_name == ""
    assert config.cert_manager_version == "v1.12.2"
    assert config.cert_manager_install_crd is True
    assert config.files == []
    assert config.verbose is False


def test_read_flags_values_with_equals_and_double_dash():
    config = read_flags(
        ["-cert-manager-install-crd=false", "--cert-manager-version", "v1.0.0", "--vv"]
    )
    assert config.cert_manager_install_crd is False
    assert config.cert_manager_version == "v1.0.0"
    assert config.very_verbose is True


def test_read_flags_stops_at_first_positional():
    config = read_flags(["mychart", "-v"])
    assert config.chart_name == "mychart"
    assert config.verbose is False


def test_read_flags_unknown_flag_exits_with_usage_error(capsys):
    with pytest.raises(SystemExit) as excinfo:
        read_flags(["-nope"])
    assert excinfo.value.code == 2
    assert "flag provided but not defined: -nope" in capsys.readouterr().err


@pytest.mark.parametrize("argv", [["-f"], ["-r=maybe"], ["---v"]])
def test_read_flags_malformed_arguments_exit(argv):
    with pytest.raises(SystemExit) as excinfo:
        read_flags(argv)
    assert excinfo.value.code == 2


def test_read_flags_help(capsys):
    with pytest.raises(SystemExit) as excinfo:
        read_flags(["-help"])
    assert excinfo.value.code == 0
    captured = capsys.readouterr()
    assert "Usage:" in captured.out
    assert "-cert-manager-version" in captured.err
    assert '(default "v1.12.2")' in captured.err


def test_read_flags_version(capsys):
    with pytest.raises(SystemExit) as excinfo:
        read_flags(["-version"])
    assert excinfo.value.code == 0
    assert "Version:    development" in capsys.readouterr().out


def test_print_version(capsys):
    print_version()
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "Version:    development"
    assert lines[1] == "Build Time: not set"
    assert lines[2] == "Git Commit: not set"


def test_main_builds_chart_from_files(tmp_path):
    manifest = tmp_path / "app.yaml"
    manifest.write_text(MANIFEST)
    assert main(["-f", str(manifest), str(tmp_path / "chart")]) == 0
    assert (tmp_path / "chart" / "Chart.yaml").is_file()
    assert "foo" in (tmp_path / "chart" / "values.yaml").read_text()


def test_main_reads_stdin(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO(MANIFEST))
    assert main([str(tmp_path / "chart")]) == 0
    assert (tmp_path / "chart" / "templates" / "_helpers.tpl").is_file()


def test_main_reports_invalid_chart_name(tmp_path):
    manifest = tmp_path / "app.yaml"
    manifest.write_text(MANIFEST)
    assert main(["-f", str(manifest), str(tmp_path / "bad_name")]) == 1
    assert not (tmp_path / "bad_name").exists()