import subprocess
from datetime import date
from pathlib import Path

from click.testing import CliRunner

from plume.cli import cli

SKIP_GIT = {"PLUME_SKIP_GIT_INIT": "1"}


class FakeQuestion:
    def __init__(self, answer):
        self.answer = answer

    def ask(self):
        return self.answer


def answer_prompts(monkeypatch, text_answers, confirm_answers):
    texts = list(text_answers)
    confirms = list(confirm_answers)
    monkeypatch.setattr("plume.cli.questionary.text", lambda *a, **k: FakeQuestion(texts.pop(0)))
    monkeypatch.setattr("plume.cli.questionary.confirm", lambda *a, **k: FakeQuestion(confirms.pop(0)))


def test_cli_init_scaffolds_buildable_project(tmp_path, monkeypatch):
    runner = CliRunner()
    target = tmp_path / "blog"
    result = runner.invoke(cli, ["init", str(target)], env=SKIP_GIT)
    assert result.exit_code == 0
    assert (target / "templates" / "index.html").exists()
    assert (target / "templates" / "post.html").exists()
    assert (target / "templates" / "styles.css").exists()
    assert (target / "plume.yaml").exists()
    assert len(list((target / "posts").glob("*-hello-world.md"))) == 1

    monkeypatch.chdir(target)
    result = runner.invoke(cli, ["build"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "Built 1 posts into" in result.output
    index = (target / "docs" / "index.html").read_text(encoding="utf-8")
    assert "Hello World" in index
    assert (target / "docs" / "styles.css").exists()

    # fails on non-empty directory
    result = runner.invoke(cli, ["init", str(target)], env=SKIP_GIT)
    assert result.exit_code != 0
    assert "non-empty" in result.output


def test_cli_build_failure_exits_nonzero(tmp_path, monkeypatch):
    (tmp_path / "posts").mkdir()
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()
    result = runner.invoke(cli, ["build"])
    assert result.exit_code == 1
    assert "Build failed:" in result.output
    assert "File: templates/index.html" in result.output
    assert "File or directory not found" in result.output


def test_cli_build_reports_malformed_config(tmp_path, monkeypatch):
    (tmp_path / "plume.yaml").write_text("output_dir: [docs\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["build"])
    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert "Build failed:" in result.output
    assert "File: plume.yaml" in result.output
    assert "Invalid YAML" in result.output


def test_cli_new_reports_malformed_config(tmp_path, monkeypatch):
    (tmp_path / "plume.yaml").write_text("posts_dir: [posts\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["new"])
    assert result.exit_code == 1
    assert "Invalid YAML" in result.output


def test_cli_dev_passes_port(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    called = {}

    class DummyLoop:
        def __init__(self, root, port=None):
            called["root"] = root
            called["port"] = port

        def start(self):
            called["started"] = True

    monkeypatch.setattr("plume.dev.DevLoop", DummyLoop)
    result = CliRunner().invoke(cli, ["dev", "--port", "5050"], catch_exceptions=False)
    assert result.exit_code == 0
    assert called == {"root": tmp_path, "port": 5050, "started": True}


def test_cli_dev_exit_code_from_loop(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)

    class FailingLoop:
        def __init__(self, root, port=None):
            pass

        def start(self):
            raise SystemExit(1)

    monkeypatch.setattr("plume.dev.DevLoop", FailingLoop)
    result = CliRunner().invoke(cli, ["dev"])
    assert result.exit_code == 1


def test_cli_new_creates_post(monkeypatch, tmp_path):
    (tmp_path / "posts").mkdir()
    monkeypatch.chdir(tmp_path)
    answer_prompts(monkeypatch, ["My First Post", "intro, notes"], [True, True])

    result = CliRunner().invoke(cli, ["new"], catch_exceptions=False)
    assert result.exit_code == 0
    expected = Path("posts") / f"{date.today().isoformat()}-my-first-post.md"
    assert f"Created {expected}" in result.output

    text = (tmp_path / expected).read_text(encoding="utf-8")
    assert text.startswith("---\ntitle: My First Post\n")
    assert "tags:\n- intro\n- notes\n" in text
    assert "draft: true" in text
    assert text.endswith("---\n\n# My First Post\n\n")


def test_cli_new_without_date_prefix_refuses_overwrite(monkeypatch, tmp_path):
    (tmp_path / "posts").mkdir()
    (tmp_path / "posts" / "about.md").write_text("x", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    answer_prompts(monkeypatch, ["About", ""], [False, False])

    result = CliRunner().invoke(cli, ["new"])
    assert result.exit_code != 0
    assert "File already exists: posts/about.md" in result.output
    assert (tmp_path / "posts" / "about.md").read_text(encoding="utf-8") == "x"


def test_cli_new_aborts_on_cancel(monkeypatch, tmp_path):
    (tmp_path / "posts").mkdir()
    monkeypatch.chdir(tmp_path)
    answer_prompts(monkeypatch, [None], [])
    result = CliRunner().invoke(cli, ["new"])
    assert result.exit_code != 0
    assert list((tmp_path / "posts").iterdir()) == []


def test_cli_new_requires_posts_dir(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["new"])
    assert result.exit_code != 0
    assert "No posts directory found" in result.output


def test_module_main_entrypoint():
    from plume.__main__ import main

    assert callable(main)


def test_main_invokes_cli(monkeypatch):
    import plume.cli as cli_mod

    called = {}

    def fake_cli():
        called["ran"] = True

    original_cli = cli_mod.cli
    cli_mod.cli = fake_cli
    try:
        cli_mod.main()
    finally:
        cli_mod.cli = original_cli
    assert called["ran"]


def test_try_git_init(monkeypatch, tmp_path):
    from plume.cli import _try_git_init

    called = {}
    monkeypatch.setenv("PLUME_SKIP_GIT_INIT", "0")
    monkeypatch.setattr("plume.cli.shutil.which", lambda cmd: "/usr/bin/git")

    def fake_run(cmd, cwd=None, check=None, capture_output=None):
        called["cmd"] = cmd
        called["cwd"] = cwd
        return subprocess.CompletedProcess(cmd, 0)

    monkeypatch.setattr("plume.cli.subprocess.run", fake_run)
    _try_git_init(tmp_path)
    assert called["cmd"] == ["/usr/bin/git", "init"]
    assert called["cwd"] == tmp_path


def test_try_git_init_failure_is_ignored(monkeypatch, tmp_path):
    from plume.cli import _try_git_init

    monkeypatch.setenv("PLUME_SKIP_GIT_INIT", "0")
    monkeypatch.setattr("plume.cli.shutil.which", lambda cmd: "/usr/bin/git")

    def fake_run(cmd, cwd=None, check=None, capture_output=None):
        raise subprocess.CalledProcessError(128, cmd)

    monkeypatch.setattr("plume.cli.subprocess.run", fake_run)
    _try_git_init(tmp_path)  # should not raise

    monkeypatch.setattr("plume.cli.shutil.which", lambda cmd: None)
    _try_git_init(tmp_path)
