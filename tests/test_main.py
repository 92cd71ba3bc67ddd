import pytest
import json
from unittest.mock import patch

from devserve.main import build_parser, load_config, main

class TestCommandLine:
    def test_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = load_config([])

        assert config.root == "."
        assert config.port == 8080
        assert config.markdown is True

    def test_flags(self, tmp_path):
        config = load_config(["-p", "9001", "--no-markdown", "--debounce", "0.5", str(tmp_path)])

        assert config.port == 9001
        assert config.markdown is False
        assert config.debounce_delay == 0.5
        assert config.root == str(tmp_path)

    def test_flags_beat_config_file(self, tmp_path):
        config_path = tmp_path / "devserve.json"
        config_path.write_text(json.dumps({"port": 7000, "host": "0.0.0.0", "root": str(tmp_path)}))

        config = load_config(["--config", str(config_path), "--port", "7001"])

        assert config.port == 7001
        assert config.host == "0.0.0.0"

    @pytest.mark.parametrize("argv", [
        ["--port", "nope"],
        ["/definitely/not/here"],
        ["--config", "/definitely/not/here.json"],
        ["--log-level", "LOUD"],
    ])
    def test_bad_arguments_exit_with_usage(self, argv, capsys):
        with pytest.raises(SystemExit) as exc_info:
            load_config(argv)

        assert exc_info.value.code == 2
        assert "usage:" in capsys.readouterr().err

    @pytest.mark.parametrize("contents", [
        '{"port": "abc"}',
        '{"markdown": "no"}',
        '{"debounce_delay": true}',
        "[1]",
    ])
    def test_bad_config_file_exits_with_usage(self, tmp_path, contents, capsys):
        config_path = tmp_path / "devserve.json"
        config_path.write_text(contents)

        with pytest.raises(SystemExit) as exc_info:
            load_config(["--config", str(config_path), str(tmp_path)])

        assert exc_info.value.code == 2
        assert "usage:" in capsys.readouterr().err

    def test_parser_prog(self):
        assert build_parser().prog == "devserve"

    def test_main_runs_uvicorn(self, tmp_path):
        with patch("devserve.main.uvicorn.run") as run:
            main(["-p", "9002", str(tmp_path)])

        run.assert_called_once()
        _, kwargs = run.call_args
        assert kwargs["port"] == 9002
        assert kwargs["host"] == "localhost"
