"""Tests for the command-line entry point."""

from pathlib import Path

import pytest

from eureka_exporter import __main__ as cli
from eureka_exporter.__main__ import AgentArgs, parse_agent_args


class TestParseAgentArgs:
    """Tests for parse_agent_args()."""

    @pytest.mark.tier(0)
    @pytest.mark.core
    def test_port_and_config(self) -> None:
        """Without a host the default bind address is used."""
        assert parse_agent_args("9404:conf/app.yml") == AgentArgs(
            "0.0.0.0", 9404, "conf/app.yml"
        )

    @pytest.mark.tier(0)
    @pytest.mark.core
    def test_host_port_and_config(self) -> None:
        """A leading host is honored."""
        assert parse_agent_args("localhost:9404:/etc/app.yml") == AgentArgs(
            "localhost", 9404, "/etc/app.yml"
        )

    @pytest.mark.tier(0)
    @pytest.mark.core
    def test_bracketed_ipv6_host(self) -> None:
        """IPv6 hosts are given in brackets and unwrapped."""
        assert parse_agent_args("[::1]:9404:app.yml").host == "::1"

    @pytest.mark.tier(0)
    @pytest.mark.core
    def test_windows_style_config_path(self) -> None:
        """Everything after the port belongs to the config path."""
        assert parse_agent_args("9404:C:\\conf\\app.yml").config_file == (
            "C:\\conf\\app.yml"
        )

    @pytest.mark.tier(0)
    @pytest.mark.core
    @pytest.mark.parametrize("args", ["", "app.yml", "host:app.yml", "9404:"])
    def test_malformed_arguments_raise(self, args: str) -> None:
        """Arguments without a port and config file are rejected."""
        with pytest.raises(ValueError, match="Malformed arguments"):
            parse_agent_args(args)


class TestMain:
    """Tests for main()."""

    @pytest.mark.tier(1)
    def test_bad_arguments_exit_with_usage(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Malformed arguments print usage and return 1."""
        assert cli.main(["nonsense"]) == 1
        assert "Usage:" in capsys.readouterr().err

    @pytest.mark.tier(1)
    def test_bad_config_exits_with_usage(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """A configuration error prints usage and return 1."""
        path = tmp_path / "bad.yml"
        path.write_text("metric: {eureka: {enabled: true}}\nserver: {port: x}\n")
        assert cli.main([f"9404:{path}"]) == 1
        assert "server.port" in capsys.readouterr().err

    @pytest.mark.tier(1)
    def test_runs_server_with_parsed_arguments(
        self, config_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A valid invocation starts uvicorn on the requested address."""
        calls: dict[str, object] = {}

        def fake_run(app: object, **kwargs: object) -> None:
            calls["app"] = app
            calls.update(kwargs)

        monkeypatch.setattr(cli.uvicorn, "run", fake_run)

        assert cli.main([f"127.0.0.1:9404:{config_path}", "--log-level", "DEBUG"]) == 0
        assert calls["host"] == "127.0.0.1"
        assert calls["port"] == 9404
        assert calls["log_level"] == "debug"
        assert callable(calls["app"])
