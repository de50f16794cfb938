from argonode import main as entry


def test_help(capsys):
    assert entry.main(["--help"]) == 0
    assert "Usage:" in capsys.readouterr().out


def test_invalid_configuration_exits_before_starting(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("UUID", "")
    monkeypatch.setattr(entry, "setup_logging", lambda: None)

    def fail(config):
        raise AssertionError("orchestrator must not be created")

    monkeypatch.setattr(entry, "NodeOrchestrator", fail)
    assert entry.main([]) == 1


def test_config_flag_without_value(capsys):
    assert entry.main(["--config"]) == 1
    captured = capsys.readouterr()
    assert "Unrecognized arguments: --config" in captured.err
    assert "Usage:" in captured.out


def test_unknown_flag(capsys):
    assert entry.main(["--verbose"]) == 1
    assert "Unrecognized arguments: --verbose" in capsys.readouterr().err
