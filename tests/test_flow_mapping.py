"""Tests for flow run path resolution."""

from __future__ import annotations

import pytest

from timeline_db.exceptions import ResolutionError, TimelineReaderError
from timeline_db.storage.flow_mapping import FlowPathResolver, make_flow_run_path
from timeline_db.storage.layout import StorageLayout

from conftest import write_flow_mapping


@pytest.fixture
def resolver(tmp_path) -> FlowPathResolver:
    return FlowPathResolver(StorageLayout(tmp_path))


class TestDirectPath:
    """Test resolution when all routing keys are given."""

    def test_make_flow_run_path(self) -> None:
        """Test the relative path is user/flow/flowrun."""
        assert make_flow_run_path("u", "f", 7) == "u/f/7"

    def test_direct_path_skips_index(self, resolver: FlowPathResolver) -> None:
        """Test no index is needed when user, flow and run are known."""
        assert resolver.resolve("c1", "app_1", "u", "f", 3) == "u/f/3"

    def test_direct_path_without_cluster_or_app(self, resolver: FlowPathResolver) -> None:
        """Test cluster and app are not required for the direct path."""
        assert resolver.resolve(None, None, "u", "f", 0) == "u/f/0"

    def test_direct_path_wins_over_index(self, resolver: FlowPathResolver, tmp_path) -> None:
        """Test explicit routing keys are used even if the index disagrees."""
        write_flow_mapping(tmp_path, "c1", ["app_1,other,flow,9"])
        assert resolver.resolve("c1", "app_1", "u", "f", 3) == "u/f/3"


class TestIndexLookup:
    """Test resolution through app_flow_mapping.csv."""

    def test_lookup_matching_row(self, resolver: FlowPathResolver, tmp_path) -> None:
        """Test the flow run path is read from the matching row."""
        write_flow_mapping(tmp_path, "c1", ["app_1,u,f,7"])
        assert resolver.resolve("c1", "app_1") == "u/f/7"

    def test_partial_keys_use_index(self, resolver: FlowPathResolver, tmp_path) -> None:
        """Test any missing routing key triggers the index lookup."""
        write_flow_mapping(tmp_path, "c1", ["app_1,u,f,7"])
        assert resolver.resolve("c1", "app_1", user_id="x", flow_name="y") == "u/f/7"

    def test_first_match_wins(self, resolver: FlowPathResolver, tmp_path) -> None:
        """Test rows are scanned in order and the first match is used."""
        write_flow_mapping(
            tmp_path,
            "c1",
            ["app_0,a,b,1", "app_1,u,f,7", "app_1,u,f,8"],
        )
        assert resolver.resolve("c1", "app_1") == "u/f/7"

    def test_blank_app_matches_any(self, resolver: FlowPathResolver, tmp_path) -> None:
        """Test a row with a blank APP field matches every application."""
        write_flow_mapping(tmp_path, "c1", [" ,u,f,5", "app_1,u,f,7"])
        assert resolver.resolve("c1", "app_1") == "u/f/5"

    def test_short_rows_skipped(self, resolver: FlowPathResolver, tmp_path) -> None:
        """Test rows with fewer than four fields are ignored."""
        write_flow_mapping(tmp_path, "c1", ["app_1,u,f", "", "app_1,u,f,7"])
        assert resolver.resolve("c1", "app_1") == "u/f/7"

    def test_fields_trimmed(self, resolver: FlowPathResolver, tmp_path) -> None:
        """Test whitespace around fields is removed."""
        write_flow_mapping(tmp_path, "c1", [" app_1 , u , f , 7 "])
        assert resolver.resolve("c1", "app_1") == "u/f/7"

    def test_extra_fields_ignored(self, resolver: FlowPathResolver, tmp_path) -> None:
        """Test trailing fields beyond FLOWRUN do not affect the path."""
        write_flow_mapping(tmp_path, "c1", ["app_1,u,f,7,extra"])
        assert resolver.resolve("c1", "app_1") == "u/f/7"

    def test_header_never_matches(self, resolver: FlowPathResolver, tmp_path) -> None:
        """Test the header row is not mistaken for a mapping."""
        write_flow_mapping(tmp_path, "c1", [])
        with pytest.raises(ResolutionError):
            resolver.resolve("c1", "app_1")

    def test_index_per_cluster(self, resolver: FlowPathResolver, tmp_path) -> None:
        """Test each cluster has its own index."""
        write_flow_mapping(tmp_path, "c1", ["app_1,u1,f1,1"])
        write_flow_mapping(tmp_path, "c2", ["app_1,u2,f2,2"])
        assert resolver.resolve("c2", "app_1") == "u2/f2/2"


class TestResolutionErrors:
    """Test failures to resolve a flow run path."""

    def test_no_matching_row(self, resolver: FlowPathResolver, tmp_path) -> None:
        """Test an application absent from the index raises ResolutionError."""
        write_flow_mapping(tmp_path, "c1", ["app_2,u,f,7"])
        with pytest.raises(ResolutionError, match="Unable to get flow info"):
            resolver.resolve("c1", "app_1")

    def test_missing_index(self, resolver: FlowPathResolver) -> None:
        """Test a missing index file raises ResolutionError."""
        with pytest.raises(ResolutionError) as exc_info:
            resolver.resolve("c1", "app_1")
        assert isinstance(exc_info.value.__cause__, OSError)

    @pytest.mark.parametrize(
        ("cluster_id", "app_id"),
        [(None, "app_1"), ("c1", None), (None, None)],
    )
    def test_missing_cluster_or_app(
        self, resolver: FlowPathResolver, tmp_path, cluster_id, app_id
    ) -> None:
        """Test the lookup needs both cluster and application ids."""
        write_flow_mapping(tmp_path, "c1", ["app_1,u,f,7"])
        with pytest.raises(ResolutionError):
            resolver.resolve(cluster_id, app_id, user_id="u")

    def test_resolution_error_hierarchy(self) -> None:
        """Test ResolutionError is a TimelineReaderError."""
        assert issubclass(ResolutionError, TimelineReaderError)
