from forkbot.publish.pr_message import TRUNCATION_MARKER, build_pr_body, classify_change, truncate_report


class TestClassifyChange:
    def test_known_codes(self):
        assert classify_change("A") == "Added"
        assert classify_change("M") == "Modified"
        assert classify_change("D") == "Deleted"
        assert classify_change("R100") == "Renamed"

    def test_unknown_code(self):
        assert classify_change("T") == "Changed"


class TestTruncateReport:
    def test_short_report_unchanged(self):
        assert truncate_report("short", 100) == "short"

    def test_long_report_is_cut(self):
        result = truncate_report("x" * 50, 10)
        assert result == "x" * 10 + TRUNCATION_MARKER


class TestBuildPrBody:
    def test_all_sections(self):
        body = build_pr_body(
            changes=[("A", "Dockerfile"), ("M", "README.md")],
            shortstat="2 files changed",
            task_log=["Added Dockerfile"],
            flags={"dockerfile_added": True, "workflow_added": True},
            report="# Code Quality Report",
            intro="Housekeeping only.",
        )

        assert body.startswith("## Pull Request Summary\n\nHousekeeping only.")
        assert "> 2 files changed" in body
        assert "- Added: `Dockerfile`\n- Modified: `README.md`" in body
        assert "### Task Log\n\n- Added Dockerfile" in body
        assert "- Added GitHub Actions Docker workflow." in body
        assert "```markdown\n# Code Quality Report\n```" in body
        assert body.endswith("---")

    def test_empty_change_set(self):
        body = build_pr_body(changes=[])

        assert "> No stats available." in body
        assert "- No file changes detected." in body
        assert "### Task Log" not in body
        assert "### Docker Notes" not in body
        assert "### Code Quality Analysis" not in body

    def test_report_is_truncated(self):
        body = build_pr_body(changes=[], report="y" * 3000, report_max_chars=2000)
        assert "y" * 2000 + TRUNCATION_MARKER in body
        assert "y" * 2001 not in body
