"""
CLI interface tests for dep-tree-diff.
Tests the command-line interface and main entry points.
"""

import json

from click.testing import CliRunner

from dep_tree_diff.main import __version__, cli


def _flat(output: str) -> str:
    """Collapse rich line wrapping so phrases can be matched."""
    return " ".join(output.split())


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "dep-tree-diff" in _flat(result.output).lower()

    def test_cli_version(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in _flat(result.output)

    def test_info_command(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["info"])

        assert result.exit_code == 0
        assert "dependency:tree" in _flat(result.output)


class TestDiffCommand:
    """Test the diff command."""

    def test_diff_prints_sizes_and_changes(self, sample_original_tree, sample_new_tree):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["diff", "-a", sample_original_tree, "-b", sample_new_tree]
        )

        assert result.exit_code == 0, result.output
        assert "Original dependencies size: 2" in _flat(result.output)
        assert "New dependencies size: 2" in _flat(result.output)
        assert "lib-c" in _flat(result.output)
        assert "lib-a" in _flat(result.output)

    def test_diff_requires_both_sides(self, sample_original_tree):
        runner = CliRunner()
        result = runner.invoke(cli, ["diff", "-a", sample_original_tree])

        assert result.exit_code != 0
        assert "--new" in _flat(result.output)

    def test_diff_nonexistent_file(self, sample_original_tree):
        runner = CliRunner()
        result = runner.invoke(cli, ["diff", "-a", sample_original_tree, "-b", "missing.txt"])

        assert result.exit_code != 0
        assert "does not exist" in _flat(result.output).lower()

    def test_diff_no_changes(self, sample_original_tree):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["diff", "-a", sample_original_tree, "-b", sample_original_tree]
        )

        assert result.exit_code == 0
        assert "No dependency changes found" in _flat(result.output)

    def test_conflict_warning_is_printed(self, write_tree):
        first = write_tree("a.txt", ["g:x:jar:1.0.0:compile"])
        second = write_tree("b.txt", ["g:x:jar:1.1.0:compile"])
        after = write_tree("after.txt", ["g:x:jar:1.1.0:compile"])

        runner = CliRunner()
        result = runner.invoke(cli, ["diff", "-a", first, "-a", second, "-b", after])

        assert result.exit_code == 0
        assert "WARN - 'g:x:1.1.0'" in _flat(result.output)
        assert "The last one (b.txt) will be used for the comparison." in _flat(result.output)
        assert "No dependency changes found" in _flat(result.output)

    def test_quiet_suppresses_warnings_and_sizes(self, write_tree):
        first = write_tree("a.txt", ["g:x:jar:1.0.0:compile"])
        second = write_tree("b.txt", ["g:x:jar:1.1.0:compile"])

        runner = CliRunner()
        result = runner.invoke(cli, ["diff", "-q", "-a", first, "-a", second, "-b", second])

        assert result.exit_code == 0
        assert "WARN" not in _flat(result.output)
        assert "dependencies size" not in _flat(result.output)

    def test_quiet_help_mentions_suppressed_warnings(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["diff", "--help"])

        assert result.exit_code == 0
        assert "merge conflict and skipped entry warnings" in _flat(result.output)

    def test_malformed_entry_warning_is_printed(self, write_tree):
        before = write_tree("before.txt", ["g:a:jar:1.0.0:compile", "g:b:jar:1.0.0:compile"])
        after = write_tree("after.txt", ["g:a:jar:1.0.0:compile", "g:b:jar:x:y:1.0.0:compile"])

        runner = CliRunner()
        result = runner.invoke(cli, ["diff", "-a", before, "-b", after])

        assert result.exit_code == 0
        assert "WARN - Skipped malformed entry at after.txt:4" in _flat(result.output)
        assert "Unrecognised coordinate" in _flat(result.output)

    def test_quiet_suppresses_malformed_entry_warning(self, write_tree):
        before = write_tree("before.txt", ["g:a:jar:1.0.0:compile"])
        after = write_tree("after.txt", ["g:a:jar:x:y:1.0.0:compile"])

        runner = CliRunner()
        result = runner.invoke(cli, ["diff", "-q", "-a", before, "-b", after])

        assert result.exit_code == 0
        assert "Skipped malformed entry" not in _flat(result.output)

    def test_line_limit_fails_the_run(self, sample_original_tree, write_tree, monkeypatch):
        after = write_tree(
            "after.txt",
            [
                "g:a:jar:1.0.0:compile",
                "g:b:jar:1.0.0:compile",
                "g:c:jar:1.0.0:compile",
                "g:d:jar:1.0.0:compile",
            ],
        )
        monkeypatch.setenv("DEP_TREE_DIFF_MAX_LINES_PER_FILE", "3")

        runner = CliRunner()
        result = runner.invoke(cli, ["diff", "-a", sample_original_tree, "-b", after])

        assert result.exit_code != 0
        assert "too many lines" in _flat(result.output)
        assert "g:d" not in _flat(result.output)

    def test_verbose_from_config_file(self, sample_original_tree, sample_new_tree, tmp_path):
        (tmp_path / ".dep-tree-diff.json").write_text(
            json.dumps({"diff": {"verbose": True}}), encoding="utf-8"
        )

        runner = CliRunner()
        result = runner.invoke(cli, ["diff", "-a", sample_original_tree, "-b", sample_new_tree])

        assert result.exit_code == 0, result.output
        assert "Original:" in _flat(result.output)
        assert "New:" in _flat(result.output)

    def test_json_reporter(self, sample_original_tree, sample_new_tree, temp_dir):
        output = temp_dir / "report.json"
        runner = CliRunner()
        result = runner.invoke(
            cli,
            [
                "diff",
                "-a",
                sample_original_tree,
                "-b",
                sample_new_tree,
                "-r",
                "json",
                "--json-output",
                str(output),
            ],
        )

        assert result.exit_code == 0, result.output
        report = json.loads(output.read_text(encoding="utf-8"))
        assert report["added"] == ["org.example:lib-c:1.0.0"]
        assert report["removed"] == ["org.example:lib-a:1.0.0"]
        assert report["minor"] == [
            {"original": "org.example:lib-b:2.0.0", "new": "org.example:lib-b:2.1.0"}
        ]

    def test_markdown_reporter(self, sample_original_tree, sample_new_tree, temp_dir):
        output = temp_dir / "report.md"
        runner = CliRunner()
        result = runner.invoke(
            cli,
            [
                "diff",
                "-a",
                sample_original_tree,
                "-b",
                sample_new_tree,
                "-r",
                "markdown",
                "--markdown-output",
                str(output),
            ],
        )

        assert result.exit_code == 0, result.output
        content = output.read_text(encoding="utf-8")
        assert "### Added dependencies (1)" in content
        assert "### Minor version upgrades (1)" in content

    def test_unknown_reporter_rejected(self, sample_original_tree, sample_new_tree):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["diff", "-a", sample_original_tree, "-b", sample_new_tree, "-r", "xml"]
        )

        assert result.exit_code != 0

    def test_fail_on_major(self, write_tree):
        before = write_tree("before.txt", ["g:x:jar:1.0.0:compile"])
        after = write_tree("after.txt", ["g:x:jar:2.0.0:compile"])

        runner = CliRunner()
        passing = runner.invoke(cli, ["diff", "-a", before, "-b", after])
        failing = runner.invoke(cli, ["diff", "-a", before, "-b", after, "--fail-on-major"])

        assert passing.exit_code == 0
        assert failing.exit_code == 1

    def test_fail_on_major_from_environment(self, write_tree, monkeypatch):
        before = write_tree("before.txt", ["g:x:jar:1.0.0:compile"])
        after = write_tree("after.txt", ["g:x:jar:2.0.0:compile"])
        monkeypatch.setenv("DEP_TREE_DIFF_FAIL_ON_MAJOR", "true")

        runner = CliRunner()
        result = runner.invoke(cli, ["diff", "-a", before, "-b", after])

        assert result.exit_code == 1

    def test_reporters_from_config_file(self, sample_original_tree, sample_new_tree, tmp_path):
        (tmp_path / ".dep-tree-diff.json").write_text(
            json.dumps(
                {
                    "diff": {"reporters": ["json"]},
                    "reporting": {"json_output_file": "from-config.json"},
                }
            ),
            encoding="utf-8",
        )

        runner = CliRunner()
        result = runner.invoke(cli, ["diff", "-a", sample_original_tree, "-b", sample_new_tree])

        assert result.exit_code == 0, result.output
        assert (tmp_path / "from-config.json").exists()


class TestConfigCommands:
    """Test configuration management commands."""

    def test_config_init_and_validate(self, tmp_path):
        runner = CliRunner()
        config_path = tmp_path / "sample.json"

        init = runner.invoke(cli, ["config", "init", "--path", str(config_path)])
        assert init.exit_code == 0
        assert config_path.exists()

        validate = runner.invoke(cli, ["config", "validate", str(config_path)])
        assert validate.exit_code == 0
        assert "is valid" in _flat(validate.output)

    def test_config_init_refuses_overwrite(self, tmp_path):
        config_path = tmp_path / "existing.json"
        config_path.write_text("{}", encoding="utf-8")

        runner = CliRunner()
        result = runner.invoke(cli, ["config", "init", "--path", str(config_path)])

        assert result.exit_code == 0
        assert "already exists" in _flat(result.output)
        assert config_path.read_text(encoding="utf-8") == "{}"

    def test_config_validate_rejects_bad_values(self, tmp_path):
        config_path = tmp_path / "bad.yaml"
        config_path.write_text(
            "diff:\n  reporters: [xml]\nsecurity:\n  max_file_size_mb: 0\n",
            encoding="utf-8",
        )

        runner = CliRunner()
        result = runner.invoke(cli, ["config", "validate", str(config_path)])

        assert result.exit_code == 1
        assert "unknown reporters" in _flat(result.output)

    def test_config_validate_toml(self, tmp_path):
        config_path = tmp_path / "good.toml"
        config_path.write_text('[diff]\nreporters = ["markdown"]\n', encoding="utf-8")

        runner = CliRunner()
        result = runner.invoke(cli, ["config", "validate", str(config_path)])

        assert result.exit_code == 0

    def test_config_show(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["config", "show"])

        assert result.exit_code == 0
        assert "Reporters: console only" in _flat(result.output)
