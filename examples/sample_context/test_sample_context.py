"""Tests for the sample context example."""


class TestSampleContextApp:
    """Verify the analysis API on a realistic page template."""

    def test_free_variables(self, example_app) -> None:
        assert list(example_app.schema) == ["page", "site_name", "comments", "copyright"]

    def test_bound_names_are_excluded(self, example_app) -> None:
        for name in ("tag", "comment", "reading_time", "tag_badge"):
            assert name not in example_app.schema

    def test_loop_fields_on_elements(self, example_app) -> None:
        assert example_app.sample["page"]["tags"] == [{"label": "", "count": 0}]
        assert example_app.sample["comments"] == [
            {"is_approved": False, "text": "", "author": ""}
        ]

    def test_numeric_usage(self, example_app) -> None:
        assert example_app.sample["page"]["word_count"] == 0

    def test_dependencies(self, example_app) -> None:
        assert example_app.templates == ["base.html", "macros.html"]

    def test_completion_queries(self, example_app) -> None:
        assert example_app.title_siblings == ["author", "tags", "body", "word_count"]
        assert example_app.tags_type == "array of object (2 fields)"

    def test_template_is_clean(self, example_app) -> None:
        assert example_app.analysis.is_clean

    def test_merge_keeps_edits_and_drops_removed(self, example_app) -> None:
        merged = example_app.merged
        assert merged["page"]["title"] == "Release notes"
        assert merged["page"]["author"]["name"] == "Alice"
        assert merged["page"]["tags"] == [{"label": "", "count": 0}]
        assert merged["site_name"] == "My Site"
        assert "sidebar" not in merged

    def test_output_is_populated(self, example_app) -> None:
        assert "page.tags: array of object" in example_app.output
