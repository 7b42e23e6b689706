import json

import pytest

from godot_rust_helper import builder
from godot_rust_helper.cli import main


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ("GODOT_RUST_HELPER_CARGO", "GODOT_RUST_HELPER_LOG_LEVEL", "GODOT_RUST_HELPER_DEFAULT_TARGETS"):
        monkeypatch.delenv(var, raising=False)


def _game(tmp_path):
    game = tmp_path / "game"
    game.mkdir()
    (game / "project.godot").write_text("", encoding="utf-8")
    return game


def test_new_create_list_destroy(tmp_path, monkeypatch, capsys):
    game = _game(tmp_path)
    env = tmp_path / "env"

    assert main(["new", str(env), str(game), "--targets", "windows,linux"]) == 0
    doc = json.loads((env / "godot-rust-helper.json").read_text(encoding="utf-8"))
    assert doc["targets"] == ["windows", "linux"]

    monkeypatch.chdir(env / "src")
    assert main(["create", "Hello"]) == 0
    assert (env / "src" / "hello.rs").is_file()

    capsys.readouterr()
    assert main(["list"]) == 0
    assert "Hello" in capsys.readouterr().out

    assert main(["destroy", "Hello"]) == 0
    assert not (env / "src" / "hello.rs").exists()


def test_new_uses_default_targets_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("GODOT_RUST_HELPER_DEFAULT_TARGETS", "linux,osx")
    game = _game(tmp_path)
    assert main(["new", str(tmp_path / "env"), str(game)]) == 0
    doc = json.loads((tmp_path / "env" / "godot-rust-helper.json").read_text(encoding="utf-8"))
    assert doc["targets"] == ["linux", "osx"]


def test_errors_exit_with_status_one(tmp_path, monkeypatch, capsys):
    game = _game(tmp_path)
    env = tmp_path / "env"
    main(["new", str(env), str(game)])
    monkeypatch.chdir(env)
    main(["create", "Hello"])
    capsys.readouterr()

    assert main(["create", "Hello"]) == 1
    assert "already exists" in capsys.readouterr().err

    assert main(["destroy", "Ghost"]) == 1
    assert main(["new", str(env), str(game)]) == 1


def test_commands_outside_workspace(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["create", "Hello"]) == 1
    assert "godot-rust-helper.json" in capsys.readouterr().err


def test_import_command(tmp_path, monkeypatch):
    game = _game(tmp_path)
    main(["new", str(tmp_path / "env1"), str(game)])
    main(["new", str(tmp_path / "env2"), str(game)])
    monkeypatch.chdir(tmp_path / "env2")
    main(["create", "Temp"])

    monkeypatch.chdir(tmp_path / "env1")
    assert main(["import", "../env2", "Temp"]) == 0
    assert (tmp_path / "env1" / "src" / "temp.rs").is_file()


def test_build_command(tmp_path, monkeypatch, capsys):
    game = _game(tmp_path)
    env = tmp_path / "env"
    main(["new", str(env), str(game), "--targets", "windows"])
    monkeypatch.chdir(env)

    def fake_run(command, cwd=None, check=False):
        out = env / "target" / "debug"
        out.mkdir(parents=True)
        (out / "env.dll").write_bytes(b"dll")
        return builder.subprocess.CompletedProcess(command, 0)

    monkeypatch.setattr(builder.subprocess, "run", fake_run)
    assert main(["build"]) == 0
    assert "Build complete!" in capsys.readouterr().out
    assert (game / "rust-modules" / "env" / "env.dll").read_bytes() == b"dll"


def test_build_command_failure(tmp_path, monkeypatch):
    game = _game(tmp_path)
    env = tmp_path / "env"
    main(["new", str(env), str(game)])
    monkeypatch.chdir(env)
    monkeypatch.setattr(
        builder.subprocess, "run", lambda command, cwd=None, check=False: builder.subprocess.CompletedProcess(command, 1)
    )
    assert main(["build"]) == 1
