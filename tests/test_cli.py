from pathlib import Path

import pytest

from vibe_generate.generator import cli

from helpers import snapshot


@pytest.fixture
def checkout(templates_dir: Path, monkeypatch) -> Path:
    monkeypatch.chdir(templates_dir.parent)
    return templates_dir.parent


def test_scaffold_with_template_flag(checkout: Path, tmp_path: Path, capsys):
    out = tmp_path / "projects"
    rc = cli.main(["-t", "hello", "-n", "foo", "-o", str(out)])
    assert rc == cli.EXIT_OK
    assert (out / "foo" / "src" / "foo.rs").read_text() == "mod foo;\n"
    assert "Success!" in capsys.readouterr().out


def test_defaults_to_current_directory(checkout: Path):
    assert cli.main(["--template", "nextjs", "--name", "web"]) == 0
    assert (checkout / "web" / "package.json").read_text() == '{"name": "web"}\n'


def test_output_dir_from_settings(checkout: Path, tmp_path: Path, monkeypatch):
    monkeypatch.setenv("VIBE_GENERATE_OUTPUT_DIR", str(tmp_path / "from-env"))
    assert cli.main(["-t", "nextjs", "-n", "web"]) == 0
    assert (tmp_path / "from-env" / "web" / "package.json").exists()


def test_unknown_template(checkout: Path, capsys):
    rc = cli.main(["-t", "nope", "-n", "foo"])
    assert rc == cli.EXIT_ERROR
    err = capsys.readouterr().err
    assert "Unknown template" in err
    assert "hello" in err


def test_destination_exists(checkout: Path, tmp_path: Path, capsys):
    (tmp_path / "foo").mkdir()
    (tmp_path / "foo" / "keep").write_text("x")
    before = snapshot(tmp_path / "foo")
    rc = cli.main(["-t", "hello", "-n", "foo", "-o", str(tmp_path)])
    assert rc == cli.EXIT_ERROR
    assert "already exists" in capsys.readouterr().err
    assert snapshot(tmp_path / "foo") == before


def test_interactive_selection(checkout: Path, monkeypatch):
    monkeypatch.setattr(cli, "prompt_choice", lambda names, console: names[0])
    assert cli.main(["-n", "foo"]) == 0
    assert (checkout / "foo" / "README.md").read_text() == "# foo\n"


def test_cancelled_selection_exit_code(checkout: Path, monkeypatch, capsys):
    monkeypatch.setattr(cli, "prompt_choice", lambda names, console: None)
    rc = cli.main(["-n", "foo"])
    assert rc == cli.EXIT_CANCELLED
    assert rc not in (cli.EXIT_OK, cli.EXIT_ERROR)
    assert "Cancelled" in capsys.readouterr().err
    assert not (checkout / "foo").exists()


def test_no_templates(tmp_path: Path, monkeypatch, capsys):
    empty = tmp_path / "templates"
    empty.mkdir()
    monkeypatch.chdir(tmp_path)
    rc = cli.main(["-t", "hello", "-n", "foo"])
    assert rc == cli.EXIT_ERROR
    assert "No templates found" in capsys.readouterr().err


def test_list_templates(checkout: Path, capsys):
    assert cli.main(["--list"]) == 0
    out = capsys.readouterr().out
    assert "hello" in out
    assert "filesystem" in out


def test_name_is_required(checkout: Path):
    with pytest.raises(SystemExit) as exc:
        cli.main(["-t", "hello"])
    assert exc.value.code == 2


def test_partial_write_advice(checkout: Path, tmp_path: Path, monkeypatch, capsys):
    def boom(self, data):
        raise OSError(13, "Permission denied")

    monkeypatch.setattr(Path, "write_bytes", boom)
    rc = cli.main(["-t", "hello", "-n", "foo", "-o", str(tmp_path)])
    assert rc == cli.EXIT_ERROR
    err = capsys.readouterr().err
    assert "Failed to write" in err
    assert "partially written" in err


def test_bad_config(checkout: Path, tmp_path: Path, capsys):
    rc = cli.main(["-t", "hello", "-n", "foo", "--config", str(tmp_path / "missing.yml")])
    assert rc == cli.EXIT_ERROR
    assert "Config file not found" in capsys.readouterr().err
