"""Tests for the ormgen compile command."""

from __future__ import annotations

from pathlib import Path

from click.testing import CliRunner

from ormgen import __version__
from ormgen.cli.main import cli


class TestCompileCommand:
    def test_given_source_when_no_output_then_code_on_stdout(
        self, runner: CliRunner, project: Path, users_file: Path
    ) -> None:
        result = runner.invoke(cli, ["--config-dir", str(project), "compile", str(users_file)])

        assert result.exit_code == 0, result.output
        assert "class User:" in result.output
        assert "(dialect: postgres)" in result.output

    def test_given_output_dir_when_compile_then_writes_module(
        self, runner: CliRunner, project: Path, users_file: Path, tmp_path: Path
    ) -> None:
        # Given
        out = tmp_path / "generated"

        # When
        result = runner.invoke(
            cli, ["--config-dir", str(project), "compile", "-d", "sqlite", "-o", str(out), str(users_file)]
        )

        # Then
        assert result.exit_code == 0, result.output
        code = (out / "users.py").read_text()
        assert "last_insert_rowid()" in code
        assert "✓" in result.output

    def test_given_project_config_when_compile_then_dialect_applied(
        self, runner: CliRunner, project: Path, users_file: Path
    ) -> None:
        (project / "ormgen.yaml").write_text("codegen:\n  dialect: mysql\n  header: false\n")

        result = runner.invoke(cli, ["--config-dir", str(project), "compile", str(users_file)])

        assert result.exit_code == 0, result.output
        assert "`users`" in result.output
        assert "# Generated by ormgen" not in result.output

    def test_given_flags_when_compile_then_override_config(
        self, runner: CliRunner, project: Path, users_file: Path
    ) -> None:
        result = runner.invoke(
            cli,
            ["--config-dir", str(project), "compile", "--no-header", "--runtime-module", "app.db", str(users_file)],
        )

        assert result.exit_code == 0, result.output
        assert "from app.db import " in result.output
        assert "# Generated by ormgen" not in result.output

    def test_given_bad_runtime_module_when_compile_then_usage_error(
        self, runner: CliRunner, project: Path, users_file: Path
    ) -> None:
        result = runner.invoke(
            cli, ["--config-dir", str(project), "compile", "--runtime-module", "app-db", str(users_file)]
        )

        assert result.exit_code == 2

    def test_given_broken_source_when_compile_then_others_still_compiled(
        self, runner: CliRunner, project: Path, users_file: Path, broken_file: Path, tmp_path: Path
    ) -> None:
        """One failing source does not stop the rest; the run exits 1."""
        out = tmp_path / "generated"

        result = runner.invoke(
            cli, ["--config-dir", str(project), "compile", "-o", str(out), str(broken_file), str(users_file)]
        )

        assert result.exit_code == 1
        assert "error[MISSING_ID]" in result.output
        assert "1 of 2 sources failed" in result.output
        assert (out / "users.py").exists()
        assert not (out / "broken.py").exists()

    def test_given_many_sources_when_output_is_file_then_usage_error(
        self, runner: CliRunner, project: Path, users_file: Path, broken_file: Path, tmp_path: Path
    ) -> None:
        result = runner.invoke(
            cli,
            ["--config-dir", str(project), "compile", "-o", str(tmp_path / "all.py"), str(users_file), str(broken_file)],
        )

        assert result.exit_code == 2

    def test_given_invalid_project_config_when_run_then_reported(
        self, runner: CliRunner, project: Path, users_file: Path
    ) -> None:
        (project / "ormgen.yaml").write_text("codegen:\n  dialect: oracle\n")

        result = runner.invoke(cli, ["--config-dir", str(project), "compile", str(users_file)])

        assert result.exit_code == 1
        assert "codegen.dialect" in result.output


def test_version(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output
