"""Tests for the timeline_db command line interface."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from timeline_db.cli import app
from timeline_db.constants import STORAGE_ROOT_ENV

from conftest import APP, APPLICATION, CLUSTER, CONTAINER, FLOW, FLOW_RUN, T0, USER

runner = CliRunner()


def json_lines(output: str) -> list[dict]:
    return [json.loads(line) for line in output.splitlines() if line.startswith("{")]


class TestQueryEntity:
    """Test the ``query entity`` command."""

    def test_entity_as_json(self, timeline_store) -> None:
        result = runner.invoke(
            app,
            [
                "query", "entity", CLUSTER, APP, APPLICATION, APP,
                "--root", str(timeline_store),
                "--fields", "configs",
                "--fields", "EVENTS",
            ],
        )

        assert result.exit_code == 0, result.output
        (record,) = json_lines(result.output)
        assert record["id"] == APP
        assert record["createdtime"] == T0
        assert record["configs"] == {"a": "2", "b": "3"}
        assert [e["id"] for e in record["events"]] == ["APP_CREATED", "APP_FINISHED"]
        assert record["info"] == {}

    def test_entity_direct_route(self, timeline_store) -> None:
        result = runner.invoke(
            app,
            [
                "query", "entity", CLUSTER, APP, APPLICATION, APP,
                "--root", str(timeline_store),
                "--user", USER, "--flow", FLOW, "--flow-run", str(FLOW_RUN),
            ],
        )

        assert result.exit_code == 0, result.output
        assert json_lines(result.output)[0]["id"] == APP

    def test_entity_not_found(self, timeline_store) -> None:
        result = runner.invoke(
            app,
            ["query", "entity", CLUSTER, APP, APPLICATION, "app_missing", "-r", str(timeline_store)],
        )

        assert result.exit_code == 1
        assert "Entity not found" in result.output

    def test_unresolvable_application(self, timeline_store) -> None:
        result = runner.invoke(
            app,
            ["query", "entity", CLUSTER, "app_x", APPLICATION, "app_x", "-r", str(timeline_store)],
        )

        assert result.exit_code == 1
        assert "Query failed" in result.output


class TestQueryEntities:
    """Test the ``query entities`` command."""

    def test_entities_as_json(self, timeline_store) -> None:
        result = runner.invoke(
            app,
            [
                "query", "entities", CLUSTER, APP, CONTAINER,
                "--root", str(timeline_store),
                "--json",
                "--limit", "3",
            ],
        )

        assert result.exit_code == 0, result.output
        assert [r["id"] for r in json_lines(result.output)] == [
            "container_2",
            "container_1",
            "container_3",
        ]

    def test_entities_filters(self, timeline_store) -> None:
        result = runner.invoke(
            app,
            [
                "query", "entities", CLUSTER, APP, CONTAINER,
                "--root", str(timeline_store),
                "--json",
                "--info", "vcores=1",
                "--event", "START",
                "--relates-to", f"{APPLICATION}:{APP}",
            ],
        )

        assert result.exit_code == 0, result.output
        assert [r["id"] for r in json_lines(result.output)] == ["container_2"]

    def test_created_time_options(self, timeline_store) -> None:
        """Test epoch millis and ISO-8601 bounds are both accepted."""
        result = runner.invoke(
            app,
            [
                "query", "entities", CLUSTER, APP, CONTAINER,
                "--root", str(timeline_store),
                "--json",
                "--created-after", str(T0 + 1000),
                "--created-before", "2015-02-27T05:55:02Z",
            ],
        )

        assert result.exit_code == 0, result.output
        assert [r["id"] for r in json_lines(result.output)] == ["container_1"]

    def test_entities_table(self, timeline_store) -> None:
        result = runner.invoke(
            app, ["query", "entities", CLUSTER, APP, CONTAINER, "--root", str(timeline_store)]
        )
        assert result.exit_code == 0, result.output

    def test_no_entities(self, timeline_store) -> None:
        result = runner.invoke(
            app,
            [
                "query", "entities", CLUSTER, APP, CONTAINER,
                "--root", str(timeline_store),
                "--config", "queue=nowhere",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "No entities found" in result.output

    def test_corrupt_file(self, timeline_store, write_entity) -> None:
        """Test a corrupt entity fails the query unless skipped."""
        write_entity(CONTAINER, "container_0", "{corrupt")
        args = ["query", "entities", CLUSTER, APP, CONTAINER, "-r", str(timeline_store), "--json"]

        failed = runner.invoke(app, args)
        skipped = runner.invoke(app, [*args, "--skip-corrupt"])

        assert failed.exit_code == 1
        assert skipped.exit_code == 0, skipped.output
        assert len(json_lines(skipped.output)) == 4

    def test_non_utf8_file(self, timeline_store, app_dir) -> None:
        """Test an undecodable file is reported, not raised."""
        (app_dir / CONTAINER / "container_bad.thist").write_bytes(b"\xff\n")
        args = ["query", "entities", CLUSTER, APP, CONTAINER, "-r", str(timeline_store), "--json"]

        failed = runner.invoke(app, args)
        skipped = runner.invoke(app, [*args, "--skip-corrupt"])

        assert failed.exit_code == 1
        assert "Query failed" in failed.output
        assert skipped.exit_code == 0, skipped.output
        assert len(json_lines(skipped.output)) == 4

    @pytest.mark.parametrize(
        "extra",
        [
            ["--limit", "0"],
            ["--info", "novalue"],
            ["--relates-to", "YARN_APPLICATION"],
            ["--created-after", "not-a-time"],
            ["--created-after", "10", "--created-before", "5"],
        ],
    )
    def test_invalid_input(self, timeline_store, extra) -> None:
        result = runner.invoke(
            app,
            ["query", "entities", CLUSTER, APP, CONTAINER, "-r", str(timeline_store), *extra],
        )

        assert result.exit_code == 1
        assert "Invalid query" in result.output


class TestResolve:
    """Test the ``query resolve`` command."""

    def test_resolve_via_index(self, timeline_store) -> None:
        result = runner.invoke(app, ["query", "resolve", CLUSTER, APP, "-r", str(timeline_store)])

        assert result.exit_code == 0, result.output
        assert result.output.strip() == f"{USER}/{FLOW}/{FLOW_RUN}"

    def test_resolve_unknown(self, timeline_store) -> None:
        result = runner.invoke(app, ["query", "resolve", CLUSTER, "app_x", "-r", str(timeline_store)])

        assert result.exit_code == 1
        assert "Resolution failed" in result.output

    def test_root_from_env_file(self, timeline_store, tmp_path, monkeypatch) -> None:
        """Test the storage root can come from a .env file."""
        monkeypatch.setenv(STORAGE_ROOT_ENV, str(tmp_path / "elsewhere"))
        env_file = tmp_path / "reader.env"
        env_file.write_text(f"{STORAGE_ROOT_ENV}={timeline_store}\n", encoding="utf-8")

        result = runner.invoke(app, ["query", "resolve", CLUSTER, APP, "--env-file", str(env_file)])

        assert result.exit_code == 0, result.output
        assert result.output.strip() == f"{USER}/{FLOW}/{FLOW_RUN}"

    def test_missing_env_file(self, tmp_path) -> None:
        result = runner.invoke(
            app, ["query", "resolve", CLUSTER, APP, "-e", str(tmp_path / "missing.env")]
        )

        assert result.exit_code == 1
        assert "Environment file not found" in result.output
