"""End-to-end tests for the check-updates command."""

import json
import os

import pytest

from args import parse_args
from cli_check import run_check_updates
from composer_updates import main
from constants import ExitCodes


def write_json(path, data):
    os.makedirs(os.path.dirname(str(path)), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f)


@pytest.fixture
def project(tmp_path):
    """Project with an inline package repository and Packagist disabled."""
    write_json(tmp_path / "composer.json", {
        "name": "acme/app",
        "require": {
            "acme/widget": "^1.0",
            "acme/stable": "^2.0",
            "acme/ghost": "*",
        },
        "repositories": [
            {"packagist.org": False},
            {"type": "package", "package": [
                {"name": "acme/widget", "version": "1.2.0"},
                {"name": "acme/widget", "version": "1.5.0"},
                {"name": "acme/widget", "version": "3.0.0"},
                {"name": "acme/stable", "version": "2.1.0"},
            ]},
        ],
    })
    write_json(tmp_path / "vendor" / "composer" / "installed.json", {
        "packages": [
            {"name": "acme/widget", "version": "1.2.0"},
            {"name": "acme/stable", "version": "2.1.0"},
        ],
    })
    return tmp_path


def run(argv):
    return run_check_updates(parse_args(["check-updates"] + argv))


def test_list_report(project, capsys):
    """List style prints one line per finding."""
    code = run(["-d", str(project), "--no-platform", "--style", "list", "--no-color"])
    assert code == ExitCodes.SUCCESS.value

    lines = capsys.readouterr().out.splitlines()
    assert "Checking for available updates" in lines
    assert "acme/widget: update available 1.2.0 => 1.5.0 (within ^1.0)" in lines
    assert "acme/widget: upgrade available 1.5.0 => 3.0.0 (requires changing ^1.0)" in lines
    assert "!!! acme/ghost global package not found (un-constrained)" in lines
    assert not any(line.startswith("acme/stable") for line in lines)


def test_verbose_reports_up_to_date(project, capsys):
    """-v adds up-to-date packages."""
    run(["-d", str(project), "--no-platform", "-s", "list", "--no-color", "-v"])
    assert "acme/stable: up to date (2.1.0)" in capsys.readouterr().out.splitlines()


def test_table_report(project, capsys):
    """Table style prints aligned columns."""
    run(["-d", str(project), "--no-platform", "--no-color"])
    out = capsys.readouterr().out
    assert "Package                        | Require    | Current    | Update     | Latest    " in out
    assert "acme/widget                    | ^1.0       | 1.2.0      | 1.5.0      | 3.0.0     " in out


def test_json_export(project, capsys):
    """-o writes every result as JSON."""
    output = project / "results.json"
    run(["-d", str(project), "--no-platform", "-q", "-o", str(output)])
    assert capsys.readouterr().out == ""

    data = json.loads(output.read_text(encoding="utf-8"))
    assert [r["package"] for r in data] == ["acme/widget", "acme/stable", "acme/ghost"]
    assert data[0]["update_available"] and data[0]["upgrade_available"]
    assert data[1]["up_to_date"]
    assert data[2]["not_found"] == "global-unconstrained"


def test_error_on_updates(project):
    """--error-on-updates sets a non-zero exit code."""
    code = run(["-d", str(project), "--no-platform", "-q", "--error-on-updates"])
    assert code == ExitCodes.EXIT_UPDATES.value


def test_missing_manifest(tmp_path):
    """A missing composer.json is a file error."""
    assert run(["-d", str(tmp_path), "-q"]) == ExitCodes.FILE_ERROR.value


def test_missing_config_file(project):
    """A missing -c file is a file error."""
    code = run(["-d", str(project), "-q", "-c", str(project / "nope.yml")])
    assert code == ExitCodes.FILE_ERROR.value


def test_config_file_policy(project, capsys):
    """The config file sets style and policy."""
    config = project / "updates.yml"
    config.write_text("updates:\n  style: list\n  include_platform: false\n  always_report_up_to_date: true\n",
                      encoding="utf-8")
    run(["-d", str(project), "--no-color", "-c", str(config)])
    assert "acme/stable: up to date (2.1.0)" in capsys.readouterr().out.splitlines()


def test_main_exits_with_status(project, monkeypatch):
    """main() exits with the run's status."""
    monkeypatch.setenv("COMPOSER_UPDATES_LOG_LEVEL", "WARNING")
    with pytest.raises(SystemExit) as exc:
        main(["check-updates", "-d", str(project), "--no-platform", "-q"])
    assert exc.value.code == ExitCodes.SUCCESS.value


def test_path_repository(tmp_path, capsys):
    """Packages from a path repository are checked against installed ones."""
    write_json(tmp_path / "composer.json", {
        "require": {"acme/local": "^1.0"},
        "repositories": [
            {"packagist.org": False},
            {"type": "path", "url": "packages/*"},
        ],
    })
    write_json(tmp_path / "packages" / "local" / "composer.json", {"name": "acme/local", "version": "1.3.0"})
    write_json(tmp_path / "vendor" / "composer" / "installed.json", {
        "packages": [{"name": "acme/local", "version": "1.1.0"}],
    })
    run(["-d", str(tmp_path), "--no-platform", "-s", "list", "--no-color"])
    assert "acme/local: update available 1.1.0 => 1.3.0 (within ^1.0)" in capsys.readouterr().out.splitlines()
