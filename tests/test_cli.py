"""Tests for the CLI."""

import json
import subprocess
import sys

import pytest

SAMPLE_SNAPSHOT = "tests/fixtures/sample_snapshot.json"
TEST_RULES = "tests/fixtures/test_rules.yaml"


def run_cli(*args: str) -> subprocess.CompletedProcess:
    """Run the CLI via subprocess and return the result."""
    return subprocess.run(
        [sys.executable, "-m", "monitor_coverage_scoring", *args],
        capture_output=True,
        text=True,
    )


class TestCLIScore:
    def test_json_output(self):
        result = run_cli(SAMPLE_SNAPSHOT)
        assert result.returncode == 0, result.stderr
        data = json.loads(result.stdout)
        assert [r["id"] for r in data] == ["sys-full", "sys-partial", "sys-legacy"]
        assert set(data[0]) == {"id", "name", "part1", "part2", "part3", "part4", "total"}
        assert data[0]["total"] == 100.0

    def test_csv_output(self):
        result = run_cli(SAMPLE_SNAPSHOT, "--format", "csv")
        assert result.returncode == 0, result.stderr
        lines = result.stdout.strip().splitlines()
        assert lines[0].strip() == "id,name,part1,part2,part3,part4,total"
        assert len(lines) == 4

    def test_verbose_json(self):
        result = run_cli(SAMPLE_SNAPSHOT, "--verbose")
        assert result.returncode == 0, result.stderr
        data = json.loads(result.stdout)
        partial = data[1]
        assert partial["missing_caps"] == ["network", "db", "trans"]
        assert partial["package_level"] == "low"
        assert partial["rule_version"] == "v1"

    def test_verbose_csv(self):
        result = run_cli(SAMPLE_SNAPSHOT, "--format", "csv", "--verbose")
        assert result.returncode == 0, result.stderr
        header = result.stdout.splitlines()[0].strip()
        assert header.endswith("missing_caps,package_level,accuracy_rate_pct,discovery_rate_pct")

    def test_stats_output(self):
        result = run_cli(SAMPLE_SNAPSHOT, "--stats")
        assert result.returncode == 0
        assert "Scoring Summary" in result.stderr
        assert "Systems scored: 3" in result.stderr

    def test_custom_rules(self):
        result = run_cli(SAMPLE_SNAPSHOT, "--rules", TEST_RULES)
        assert result.returncode == 0, result.stderr
        data = json.loads(result.stdout)
        assert data[0]["total"] == 98.0

    def test_sort_by_total(self):
        result = run_cli(SAMPLE_SNAPSHOT, "--sort-by", "total")
        assert result.returncode == 0
        data = json.loads(result.stdout)
        assert [r["total"] for r in data] == [100.0, 27.0, 17.5]

    def test_min_total_filter(self):
        result = run_cli(SAMPLE_SNAPSHOT, "--min-total", "20")
        assert result.returncode == 0
        data = json.loads(result.stdout)
        assert [r["id"] for r in data] == ["sys-full", "sys-legacy"]

    def test_output_to_file(self, tmp_path):
        out_file = str(tmp_path / "results.json")
        result = run_cli(SAMPLE_SNAPSHOT, "--output", out_file)
        assert result.returncode == 0
        assert result.stdout == ""
        with open(out_file, encoding="utf-8") as f:
            data = json.load(f)
        assert len(data) == 3

    def test_single_system_breakdown(self):
        result = run_cli(SAMPLE_SNAPSHOT, "--system", "sys-partial")
        assert result.returncode == 0, result.stderr
        assert "Clearing Gateway" in result.stdout
        assert "Total:  17.5" in result.stdout
        assert "missing capabilities: network, db, trans" in result.stdout
        assert "Tools: Zabbix" in result.stdout

    @pytest.mark.parametrize("args", [
        ("nonexistent.json",),
        (SAMPLE_SNAPSHOT, "--rules", "nonexistent.yaml"),
        (SAMPLE_SNAPSHOT, "--system", "sys-unknown"),
    ])
    def test_missing_inputs(self, args):
        result = run_cli(*args)
        assert result.returncode == 2
        assert "Error" in result.stderr

    def test_no_args_shows_help(self):
        result = run_cli()
        assert result.returncode != 0
        assert "usage" in result.stdout

    def test_malformed_rule_table(self, tmp_path):
        rules = tmp_path / "bad.yaml"
        rules.write_text("version: x\nrules:\n  bogus: {}\n", encoding="utf-8")
        result = run_cli(SAMPLE_SNAPSHOT, "--rules", str(rules))
        assert result.returncode == 2
        assert "Invalid rule table" in result.stderr
        assert "Traceback" not in result.stderr

    def test_unparsable_rule_table(self, tmp_path):
        rules = tmp_path / "broken.yaml"
        rules.write_text("version: [unclosed\n", encoding="utf-8")
        result = run_cli(SAMPLE_SNAPSHOT, "--rules", str(rules))
        assert result.returncode == 2
        assert "Invalid rule table" in result.stderr

    @pytest.mark.parametrize("content", ["{not json", "[]"])
    def test_malformed_snapshot(self, tmp_path, content):
        snapshot = tmp_path / "bad.json"
        snapshot.write_text(content, encoding="utf-8")
        result = run_cli(str(snapshot))
        assert result.returncode == 2
        assert "Invalid snapshot" in result.stderr
        assert "Traceback" not in result.stderr
