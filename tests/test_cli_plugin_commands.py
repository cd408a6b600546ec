from typer.testing import CliRunner

from sdkfox import __version__
from sdkfox.cli.commands import app

runner = CliRunner()


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert f"v{__version__}" in result.output


def test_plugin_info(plugin_copy):
    plugin_dir = plugin_copy("java_main")

    result = runner.invoke(app, ["plugin", "info", str(plugin_dir)])

    assert result.exit_code == 0
    assert "java" in result.output
    assert "Available" in result.output
    assert "PreUninstall" in result.output
    assert "first note" in result.output


def test_plugin_available(plugin_copy):
    plugin_dir = plugin_copy("java_main")

    result = runner.invoke(app, ["plugin", "available", str(plugin_dir)])

    assert result.exit_code == 0
    assert "21.0.1" in result.output
    assert "17.0.9" in result.output


def test_plugin_available_with_args(plugin_copy):
    plugin_dir = plugin_copy("java_main")

    result = runner.invoke(app, ["plugin", "available", str(plugin_dir), "nothing"])

    assert result.exit_code == 0
    assert "21.0.1" not in result.output


def test_plugin_env(plugin_copy, tmp_path):
    plugin_dir = plugin_copy("java_main")

    result = runner.invoke(app, ["plugin", "env", str(plugin_dir), "21.0.1", "/sdk/java"])

    assert result.exit_code == 0
    assert "JAVA_HOME" in result.output
    assert "PATH" in result.output


def test_plugin_env_without_result(plugin_copy):
    plugin_dir = plugin_copy("java_main")

    result = runner.invoke(app, ["plugin", "env", str(plugin_dir), "empty", "/sdk/java"])

    assert result.exit_code == 1
    assert "no environment variables provided" in result.output


def test_missing_plugin_dir_reports_error(tmp_path):
    result = runner.invoke(app, ["plugin", "info", str(tmp_path / "missing")])

    assert result.exit_code == 1
    assert "NOT_FOUND" in result.output
