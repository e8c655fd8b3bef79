"""
Unit tests for ToolProvisioner.

Covers cache hits and misses, failure propagation and the end-to-end
provisioning scenarios, using a real tool cache with recorded commands.
"""

from dataclasses import replace
from unittest.mock import MagicMock, patch

import pytest

from advinstkit.config.settings import ToolRequest
from advinstkit.core.environment import ProcessEnvironmentSink
from advinstkit.core.exceptions import ExternalCommandError, FetchError, ToolNotFoundError
from advinstkit.core.tool_cache import ToolCache
from advinstkit.provision.exporter import EnvironmentExporter
from advinstkit.provision.extractor import ArtifactExtractor
from advinstkit.provision.fetcher import ArtifactFetcher
from advinstkit.provision.provisioner import ToolProvisioner, provision_tool
from advinstkit.provision.registrar import Registrar
from tests.fixtures.provisioning import seed_cache


@pytest.fixture
def downloader():
    """Download function that pretends to write the payload."""
    return MagicMock(side_effect=lambda url, destination, **kwargs: destination)


@pytest.fixture
def parts(config, tool_cache, runner, sink, downloader):
    """Provisioner built from spied collaborators."""
    store = MagicMock(wraps=tool_cache)
    fetcher = MagicMock(wraps=ArtifactFetcher(config, downloader=downloader, environ={}))
    extractor = MagicMock(wraps=ArtifactExtractor(config, tool_cache, runner))
    provisioner = ToolProvisioner(
        config,
        store=store,
        fetcher=fetcher,
        extractor=extractor,
        registrar=Registrar(config, runner),
        exporter=EnvironmentExporter(config, sink),
    )
    return provisioner, store, fetcher, extractor


class TestCacheMiss:
    """Test provisioning when nothing is cached."""

    def test_fetch_and_extract_once(self, parts, runner):
        """Test fetch then extract run exactly once each."""
        provisioner, _, fetcher, extractor = parts

        provisioner.resolve(ToolRequest(version="21.1"))

        fetcher.fetch.assert_called_once()
        extractor.extract.assert_called_once()
        payload = extractor.extract.call_args.args[0]
        assert payload.name == "advinst.msi"

    def test_details_report_download(self, parts):
        """Test result reports a fresh acquisition."""
        provisioner, _, _, _ = parts

        result = provisioner.resolve_with_details(ToolRequest(version="21.1"))

        assert result.was_cached is False
        assert result.version == "21.1.0"
        assert result.executable == result.root / "bin" / "x86" / "advancedinstaller.com"

    def test_second_call_hits_cache(self, parts):
        """Test the entry written on a miss satisfies the next lookup."""
        provisioner, _, fetcher, _ = parts

        first = provisioner.resolve(ToolRequest(version="21.1"))
        second = provisioner.resolve(ToolRequest(version="21.1.0"))

        assert first == second
        fetcher.fetch.assert_called_once()

    def test_missing_executable_after_extraction(self, parts, runner):
        """Test an extraction without the executable is fatal before registration."""
        provisioner, _, fetcher, _ = parts
        runner.materialize = False

        with pytest.raises(ToolNotFoundError):
            provisioner.resolve(ToolRequest(version="21.1", license="KEY", enable_com=True))

        fetcher.fetch.assert_called_once()
        assert runner.calls_with("/RegisterCI") == []
        assert runner.calls_with("/REGSERVER") == []

    def test_fetch_failure_aborts(self, parts, downloader, runner, sink):
        """Test fetch failure stops before extraction and export."""
        provisioner, _, _, extractor = parts
        downloader.side_effect = FetchError("404 Not Found")

        with pytest.raises(FetchError):
            provisioner.resolve(ToolRequest(version="99", license="KEY"))

        extractor.extract.assert_not_called()
        assert runner.requests == []
        assert sink.variables == {}

    def test_extraction_failure_aborts(self, parts, runner, sink, tool_cache):
        """Test engine failure surfaces its output and nothing is cached."""
        provisioner, _, _, _ = parts
        runner.fail("/a", "Error 1620. This installation package could not be opened.")

        with pytest.raises(ExternalCommandError, match="Error 1620"):
            provisioner.resolve(ToolRequest(version="21.1"))

        assert tool_cache.find("advinst", "21.1.0", "x86") is None
        assert sink.variables == {}

    def test_registration_failure_keeps_cache(self, parts, runner, sink, tool_cache):
        """Test a cached entry is not rolled back when registration fails."""
        provisioner, _, _, _ = parts
        runner.fail("/RegisterCI", "The license key is invalid.")

        with pytest.raises(ExternalCommandError, match="The license key is invalid."):
            provisioner.resolve(ToolRequest(version="21.1", license="BAD"))

        assert tool_cache.find("advinst", "21.1.0", "x86") is not None
        assert sink.variables == {}
        assert sink.paths == []


class TestCacheHit:
    """Test provisioning from the tool cache."""

    def test_no_fetch_or_extract(self, parts, config, tool_cache, tmp_path, sink):
        """Test a hit skips acquisition but still exports."""
        provisioner, _, fetcher, extractor = parts
        seed_cache(tool_cache, config, "21.1.0", tmp_path / "staging")

        result = provisioner.resolve_with_details(ToolRequest(version="21.1"))

        fetcher.fetch.assert_not_called()
        extractor.extract.assert_not_called()
        assert result.was_cached is True
        assert set(sink.variables) == {
            "AdvancedInstallerRoot",
            "AdvancedInstallerMSBuildTargets",
        }
        assert len(sink.paths) == 1

    def test_short_version_matches_full_entry(self, parts, config, tool_cache, tmp_path):
        """Test '2.1' resolves to the entry cached as '2.1.0'."""
        provisioner, store, fetcher, _ = parts
        root = seed_cache(tool_cache, config, "2.1.0", tmp_path / "staging")

        executable = provisioner.resolve(ToolRequest(version="2.1"))

        store.find.assert_called_once_with("advinst", "2.1.0", "x86")
        fetcher.fetch.assert_not_called()
        assert executable == config.executable_path(root)

    def test_registration_runs_on_hit(self, parts, config, tool_cache, tmp_path, runner):
        """Test license and COM registration are not skipped on a hit."""
        provisioner, _, _, _ = parts
        seed_cache(tool_cache, config, "21.1.0", tmp_path / "staging")

        provisioner.resolve(ToolRequest(version="21.1", license="KEY", enable_com=True))

        assert [r.args for r in runner.requests] == [["/RegisterCI", "KEY"], ["/REGSERVER"]]

    def test_registration_repeats_on_every_call(self, parts, config, tool_cache, tmp_path, runner):
        """Test registration is not memoized across invocations."""
        provisioner, _, _, _ = parts
        seed_cache(tool_cache, config, "21.1.0", tmp_path / "staging")
        request = ToolRequest(version="21.1", license="KEY")

        provisioner.resolve(request)
        provisioner.resolve(request)

        assert len(runner.calls_with("/RegisterCI")) == 2

    def test_corrupt_entry_is_fatal(self, parts, config, tool_cache, tmp_path, runner, sink):
        """Test a hit without executable raises and is not treated as a miss."""
        provisioner, _, fetcher, extractor = parts
        root = seed_cache(
            tool_cache, config, "21.1.0", tmp_path / "staging", with_executable=False
        )

        with pytest.raises(ToolNotFoundError) as exc_info:
            provisioner.resolve(ToolRequest(version="21.1", license="KEY", enable_com=True))

        assert exc_info.value.path == config.executable_path(root)
        assert "was not found" in str(exc_info.value)
        fetcher.fetch.assert_not_called()
        extractor.extract.assert_not_called()
        assert runner.requests == []
        assert sink.variables == {}


class TestRegistrationInputs:
    """Test which registration commands run."""

    @pytest.mark.parametrize(
        "license,enable_com,expected",
        [
            (None, False, []),
            ("KEY", False, [["/RegisterCI", "KEY"]]),
            (None, True, [["/REGSERVER"]]),
            ("KEY", True, [["/RegisterCI", "KEY"], ["/REGSERVER"]]),
        ],
    )
    def test_commands(self, parts, config, tool_cache, tmp_path, runner, license, enable_com, expected):
        """Test each command runs exactly when its input is set."""
        provisioner, _, _, _ = parts
        seed_cache(tool_cache, config, "21.1.0", tmp_path / "staging")

        provisioner.resolve(
            ToolRequest(version="21.1.0", license=license, enable_com=enable_com)
        )

        assert [r.args for r in runner.requests] == expected


class TestEndToEnd:
    """End-to-end provisioning scenarios."""

    def test_fresh_install_major_only(self, parts, config, tool_cache, runner, sink, downloader):
        """Test version '2' with nothing cached, no license and COM disabled."""
        provisioner, store, fetcher, extractor = parts
        assert tool_cache.find("advinst", "2.0.0", "x86") is None

        executable = provisioner.resolve(ToolRequest(version="2"))

        store.find.assert_called_once_with("advinst", "2.0.0", "x86")
        fetcher.fetch.assert_called_once_with(ToolRequest(version="2"))
        assert downloader.call_args.args[0] == (
            "https://www.advancedinstaller.com/downloads/2/advinst.msi"
        )
        extractor.extract.assert_called_once()

        root = tool_cache.find("advinst", "2.0.0", "x86")
        assert root is not None
        assert [r.executable for r in runner.requests] == ["msiexec"]

        assert sink.variables == {
            "AdvancedInstallerRoot": str(root),
            "AdvancedInstallerMSBuildTargets": str(
                root / "ProgramFilesFolder" / "MSBuild" / "Caphyon" / "Advanced Installer"
            ),
        }
        assert sink.paths == [str(root / "bin" / "x86")]
        assert executable == root / "bin" / "x86" / "advancedinstaller.com"

    def test_cached_install_with_license(self, parts, config, tool_cache, tmp_path, runner):
        """Test version '3.5.1' with a matching entry and a license."""
        provisioner, store, fetcher, extractor = parts
        root = seed_cache(tool_cache, config, "3.5.1", tmp_path / "staging")

        executable = provisioner.resolve(ToolRequest(version="3.5.1", license="KEY"))

        store.find.assert_called_once_with("advinst", "3.5.1", "x86")
        fetcher.fetch.assert_not_called()
        extractor.extract.assert_not_called()
        assert [r.args for r in runner.requests] == [["/RegisterCI", "KEY"]]
        assert runner.requests[0].executable == executable
        assert executable == config.executable_path(root)

    def test_custom_url_keeps_versioned_cache_key(self, config, tool_cache, runner, sink, downloader):
        """Test the override changes the source but not the cache key."""
        env = {"advancedinstaller_url": "https://mirror.example.com/nightly/advinst.msi"}
        provisioner = ToolProvisioner(
            config,
            store=tool_cache,
            fetcher=ArtifactFetcher(config, downloader=downloader, environ=env),
            extractor=ArtifactExtractor(config, tool_cache, runner),
            registrar=Registrar(config, runner),
            exporter=EnvironmentExporter(config, sink),
        )

        provisioner.resolve(ToolRequest(version="22.0"))

        assert downloader.call_args.args[0] == env["advancedinstaller_url"]
        assert tool_cache.find("advinst", "22.0.0", "x86") is not None


class TestConstruction:
    """Test default collaborators."""

    def test_defaults_from_config(self, config):
        """Test missing collaborators are built from configuration."""
        provisioner = ToolProvisioner(config)

        assert isinstance(provisioner.store, ToolCache)
        assert provisioner.store.cache_dir == config.cache_dir
        assert isinstance(provisioner.fetcher, ArtifactFetcher)
        assert isinstance(provisioner.extractor, ArtifactExtractor)
        assert provisioner.extractor.store is provisioner.store
        assert isinstance(provisioner.registrar, Registrar)
        assert isinstance(provisioner.exporter.sink, ProcessEnvironmentSink)

    def test_shared_runner(self, config, runner):
        """Test one runner is shared by extraction and registration."""
        provisioner = ToolProvisioner(config, runner=runner)

        assert provisioner.extractor.runner is runner
        assert provisioner.registrar.runner is runner

    def test_runner_timeout_from_config(self, config):
        """Test default runner uses the configured command timeout."""
        provisioner = ToolProvisioner(replace(config, command_timeout=900))

        assert provisioner.registrar.runner.timeout == 900

    def test_environment_shared_by_fetcher_and_extractor(self, config, tmp_path):
        """Test payload and extraction resolve the same temp root."""
        env = {"RUNNER_TEMP": str(tmp_path / "runner-temp")}
        provisioner = ToolProvisioner(replace(config, temp_dir=None), environ=env)

        assert provisioner.fetcher.environ is env
        assert provisioner.extractor.environ is env
        assert provisioner.extractor.extract_dir() == tmp_path / "runner-temp" / "advinst"


class TestProvisionTool:
    """Test provision_tool convenience function."""

    def test_builds_request(self, config, tmp_path):
        """Test arguments are forwarded as a ToolRequest."""
        with patch("advinstkit.provision.provisioner.ToolProvisioner") as mock_cls:
            mock_cls.return_value.resolve.return_value = tmp_path / "advancedinstaller.com"

            result = provision_tool("21.1", license="KEY", enable_com=True, config=config)

        mock_cls.assert_called_once_with(config)
        mock_cls.return_value.resolve.assert_called_once_with(
            ToolRequest(version="21.1", license="KEY", enable_com=True)
        )
        assert result == tmp_path / "advancedinstaller.com"
