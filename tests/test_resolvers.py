"""Tests for the yarn and npm outdated resolvers."""

import json
import subprocess
from pathlib import Path

import pytest

from outdated_stats import resolvers
from outdated_stats.models import DependencyType
from outdated_stats.resolvers import (
    NpmOutdatedResolver,
    OutdatedCommandError,
    YarnOutdatedResolver,
    group_by_type,
)


YARN_HEAD = ["Package", "Current", "Wanted", "Latest", "Package Type", "URL"]


def yarn_output(body, head=YARN_HEAD):
    lines = [
        json.dumps({"type": "info", "data": "Color legend : ..."}),
        json.dumps({"type": "table", "data": {"head": head, "body": body}}),
    ]
    return "\n".join(lines) + "\n"


def fake_run(stdout="", stderr="", returncode=1, calls=None):
    def run(cmd, capture_output, text, timeout):
        if calls is not None:
            calls.append((cmd, timeout))
        return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr=stderr)
    return run


def test_yarn_parses_table_rows(monkeypatch):
    body = [
        ["react", "16.14.0", "16.14.0", "18.2.0", "dependencies", "https://reactjs.org"],
        ["jest", "29.0.0", "29.7.0", "29.7.0", "devDependencies", "https://jestjs.io"],
    ]
    calls = []
    monkeypatch.setattr(resolvers.subprocess, "run", fake_run(stdout=yarn_output(body), calls=calls))

    records = YarnOutdatedResolver(timeout=10).list_outdated("/tmp/project")

    assert calls == [(["yarn", "outdated", "--json", "--cwd", "/tmp/project"], 10)]
    assert [r.name for r in records] == ["react", "jest"]
    assert records[0].current_version == "16.14.0"
    assert records[0].wanted_version == "16.14.0"
    assert records[0].latest_version == "18.2.0"
    assert records[0].dependency_type is DependencyType.RUNTIME
    assert records[1].dependency_type is DependencyType.DEVELOPMENT


def test_yarn_uses_head_to_locate_columns():
    head = ["Package", "Current", "Wanted", "Latest", "Workspace", "Package Type", "URL"]
    body = [["lodash", "4.17.0", "4.17.21", "4.17.21", "web", "devDependencies", "https://lodash.com"]]

    records = YarnOutdatedResolver().parse_output(yarn_output(body, head=head))

    assert records[0].name == "lodash"
    assert records[0].dependency_type is DependencyType.DEVELOPMENT


def test_yarn_falls_back_to_legacy_columns_without_head():
    body = [["some-dep", "0.0.1", "0.0.1", "exotic", "dependencies", ""]]

    records = YarnOutdatedResolver().parse_output(yarn_output(body, head=[]))

    assert records[0].latest_version == "exotic"
    assert records[0].dependency_type is DependencyType.RUNTIME


def test_yarn_success_without_output_means_nothing_outdated(monkeypatch):
    monkeypatch.setattr(resolvers.subprocess, "run", fake_run(returncode=0))

    assert YarnOutdatedResolver().list_outdated() == []


def test_yarn_success_with_stderr_raises(monkeypatch):
    monkeypatch.setattr(resolvers.subprocess, "run", fake_run(stderr="error Couldn't find package.json", returncode=0))

    with pytest.raises(OutdatedCommandError, match="package.json"):
        YarnOutdatedResolver().list_outdated()


def test_yarn_unparseable_output_raises(monkeypatch):
    monkeypatch.setattr(resolvers.subprocess, "run", fake_run(stdout="not json at all"))

    with pytest.raises(OutdatedCommandError):
        YarnOutdatedResolver().list_outdated()


def test_yarn_skips_optional_and_peer_dependencies(caplog):
    body = [
        ["fsevents", "2.0.0", "2.0.0", "2.3.3", "optionalDependencies", ""],
        ["react", "16.0.0", "16.0.0", "18.0.0", "dependencies", ""],
        ["react-dom", "16.0.0", "16.0.0", "18.0.0", "peerDependencies", ""],
    ]

    records = YarnOutdatedResolver().parse_output(yarn_output(body))

    assert [r.name for r in records] == ["react"]
    assert "Skipping fsevents" in caplog.text
    assert "Skipping react-dom" in caplog.text


def test_yarn_unknown_package_type_is_skipped():
    body = [["left-pad", "1.0.0", "1.0.0", "1.3.0", "bundledDependencies", ""]]

    assert YarnOutdatedResolver().parse_output(yarn_output(body)) == []


def test_is_counted_type():
    assert resolvers.is_counted_type("dependencies")
    assert resolvers.is_counted_type(DependencyType.DEVELOPMENT)
    assert not resolvers.is_counted_type("optionalDependencies")
    assert not resolvers.is_counted_type("peerDependencies")


def test_missing_executable_raises(monkeypatch):
    def run(*args, **kwargs):
        raise FileNotFoundError("yarn")

    monkeypatch.setattr(resolvers.subprocess, "run", run)

    with pytest.raises(OutdatedCommandError, match="not found"):
        YarnOutdatedResolver().list_outdated()


def test_timeout_raises(monkeypatch):
    def run(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    monkeypatch.setattr(resolvers.subprocess, "run", run)

    with pytest.raises(OutdatedCommandError, match="timed out"):
        NpmOutdatedResolver(timeout=1).list_outdated()


def test_npm_parses_output_and_types_from_manifest(monkeypatch, tmp_path: Path):
    (tmp_path / "package.json").write_text(
        json.dumps({
            "dependencies": {"express": "^4.0.0"},
            "devDependencies": {"eslint": "^7.0.0", "typescript": "^4.0.0"},
        }),
        encoding="utf-8",
    )
    output = {
        "express": {"current": "4.17.1", "wanted": "4.18.2", "latest": "4.18.2", "location": ""},
        "eslint": {"current": "7.32.0", "wanted": "7.32.0", "latest": "8.50.0"},
        "typescript": {"wanted": "4.9.5", "latest": "5.2.2"},
    }
    calls = []
    monkeypatch.setattr(resolvers.subprocess, "run", fake_run(stdout=json.dumps(output), calls=calls))

    records = NpmOutdatedResolver().list_outdated(tmp_path)
    by_name = {r.name: r for r in records}

    assert calls[0][0] == ["npm", "outdated", "--json", "--prefix", str(tmp_path)]
    assert by_name["express"].dependency_type is DependencyType.RUNTIME
    assert by_name["eslint"].dependency_type is DependencyType.DEVELOPMENT
    assert by_name["typescript"].current_version == resolvers.MISSING_VERSION
    assert by_name["express"].wanted_version == "4.18.2"


def test_npm_nothing_outdated(monkeypatch, tmp_path: Path):
    monkeypatch.setattr(resolvers.subprocess, "run", fake_run(stdout="{}\n", returncode=0))

    assert NpmOutdatedResolver().list_outdated(tmp_path) == []


def test_npm_error_payload_raises():
    output = json.dumps({"error": {"code": "ENOENT", "summary": "no package.json"}})

    with pytest.raises(OutdatedCommandError, match="no package.json"):
        NpmOutdatedResolver().parse_output(output)


def test_npm_invalid_json_raises():
    with pytest.raises(OutdatedCommandError):
        NpmOutdatedResolver().parse_output("{oops")


def test_npm_empty_output_raises():
    with pytest.raises(OutdatedCommandError):
        NpmOutdatedResolver().parse_output("")


def test_npm_failure_without_output_raises(monkeypatch, tmp_path: Path):
    monkeypatch.setattr(
        resolvers.subprocess, "run", fake_run(stderr="npm ERR! code ENOLOCK\n", returncode=1)
    )

    with pytest.raises(OutdatedCommandError, match="ENOLOCK"):
        NpmOutdatedResolver().list_outdated(tmp_path)


def test_npm_failure_without_any_output_reports_exit_code(monkeypatch, tmp_path: Path):
    monkeypatch.setattr(resolvers.subprocess, "run", fake_run(returncode=254))

    with pytest.raises(OutdatedCommandError, match="exited with code 254"):
        NpmOutdatedResolver().list_outdated(tmp_path)


def test_npm_skips_undeclared_dependencies(monkeypatch, tmp_path: Path, caplog):
    (tmp_path / "package.json").write_text(
        json.dumps({
            "dependencies": {"express": "^4.0.0"},
            "optionalDependencies": {"fsevents": "^2.0.0"},
            "peerDependencies": {"react": "^17.0.0"},
        }),
        encoding="utf-8",
    )
    output = {
        "express": {"current": "4.17.1", "wanted": "4.18.2", "latest": "5.0.0"},
        "fsevents": {"current": "2.0.0", "wanted": "2.3.3", "latest": "2.3.3"},
        "react": {"current": "17.0.0", "wanted": "17.0.2", "latest": "18.2.0"},
    }
    monkeypatch.setattr(resolvers.subprocess, "run", fake_run(stdout=json.dumps(output)))

    records = NpmOutdatedResolver().list_outdated(tmp_path)

    assert [r.name for r in records] == ["express"]
    assert records[0].dependency_type is DependencyType.RUNTIME
    assert "Skipping fsevents" in caplog.text


def test_npm_workspace_entries_use_first_dependent():
    output = json.dumps({
        "lodash": [
            {"current": "4.17.0", "wanted": "4.17.21", "latest": "4.17.21", "dependent": "a"},
            {"current": "4.16.0", "wanted": "4.17.21", "latest": "4.17.21", "dependent": "b"},
        ]
    })

    records = NpmOutdatedResolver().parse_output(output, declared={"lodash": DependencyType.DEVELOPMENT})

    assert records[0].current_version == "4.17.0"
    assert records[0].dependency_type is DependencyType.DEVELOPMENT


def test_group_by_type():
    body = [
        ["react", "16.0.0", "16.0.0", "18.0.0", "dependencies", ""],
        ["jest", "28.0.0", "28.0.0", "29.0.0", "devDependencies", ""],
        ["vue", "2.0.0", "2.0.0", "3.0.0", "dependencies", ""],
    ]
    records = YarnOutdatedResolver().parse_output(yarn_output(body))

    grouped = group_by_type(records)

    assert [r.name for r in grouped[DependencyType.RUNTIME]] == ["react", "vue"]
    assert [r.name for r in grouped[DependencyType.DEVELOPMENT]] == ["jest"]
    assert group_by_type([]) == {DependencyType.RUNTIME: [], DependencyType.DEVELOPMENT: []}
