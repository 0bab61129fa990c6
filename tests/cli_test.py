import os
import subprocess
import sys


def run_cli(*args, cwd=None):
    root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    cli = os.path.join(root, "cli.py")

    env = dict(os.environ)
    env.pop("SHAR_BASE_URL", None)
    env.pop("SHAR_DEFAULT_HEADERS", None)
    return subprocess.run(
        [sys.executable, cli, *args],
        text=True,
        capture_output=True,
        cwd=cwd or root,
        env=env,
        timeout=10,
    )


def test_build_prints_javascript(tmp_path):
    src = tmp_path / "hello.shar"
    src.write_text("ye naam = 'dost'\nbol 'namaste ' + naam", encoding="utf-8")

    proc = run_cli("build", str(src), cwd=str(tmp_path))
    if proc.returncode != 0:
        raise AssertionError(f"build exited with code {proc.returncode}\nSTDERR:\n{proc.stderr}")
    assert 'let naam = "dost";' in proc.stdout
    assert 'console.log("namaste " + naam);' in proc.stdout


def test_build_writes_out_file(tmp_path):
    src = tmp_path / "main.shar"
    src.write_text("aayaat { add } se './math'\nbol add(1, 2)", encoding="utf-8")
    (tmp_path / "math.shar").write_text("niryaat karya add(a, b) { wapas a + b }", encoding="utf-8")
    out = tmp_path / "main.js"

    proc = run_cli("build", str(src), "--out", str(out), cwd=str(tmp_path))
    assert proc.returncode == 0, proc.stderr
    text = out.read_text(encoding="utf-8")
    assert 'const add = __shar_mod_0["add"];' in text
    assert "console.log(add(1, 2));" in text


def test_build_fails_on_type_errors(tmp_path):
    src = tmp_path / "bad.shar"
    src.write_text('ye x = "hi"', encoding="utf-8")
    (tmp_path / "bad.shari").write_text("x: number", encoding="utf-8")

    proc = run_cli("build", str(src), cwd=str(tmp_path))
    assert proc.returncode == 1
    assert "declared as 'number'" in proc.stderr


def test_check_reports_ok(tmp_path):
    src = tmp_path / "good.shar"
    src.write_text("ye x = 1", encoding="utf-8")
    (tmp_path / "good.shari").write_text("x: number", encoding="utf-8")

    proc = run_cli("check", str(src), cwd=str(tmp_path))
    assert proc.returncode == 0
    assert "ok" in proc.stdout


def test_import_warnings_go_to_stderr(tmp_path):
    src = tmp_path / "main.shar"
    src.write_text("aayaat { x } se './missing'\nbol 1", encoding="utf-8")

    proc = run_cli("build", str(src), cwd=str(tmp_path))
    assert proc.returncode == 0
    assert "Imported file not found: ./missing" in proc.stderr
    assert "console.log(1);" in proc.stdout


def test_tokens_and_parse_commands(tmp_path):
    src = tmp_path / "t.shar"
    src.write_text("bol 1 + 2", encoding="utf-8")

    tokens = run_cli("tokens", str(src), cwd=str(tmp_path))
    assert tokens.returncode == 0
    assert "bol" in tokens.stdout

    tree = run_cli("parse", str(src), cwd=str(tmp_path))
    assert tree.returncode == 0
    assert "PrintStatement" in tree.stdout
    assert "BinaryExpression" in tree.stdout


def test_missing_file_and_usage():
    assert run_cli("build", "does-not-exist.shar").returncode == 1
    proc = run_cli()
    assert proc.returncode == 1
    assert "Usage" in proc.stdout


def test_check_without_type_spec(tmp_path):
    src = tmp_path / "plain.shar"
    src.write_text("bol 1", encoding="utf-8")

    proc = run_cli("check", str(src), cwd=str(tmp_path))
    assert proc.returncode == 0
    assert proc.stdout.splitlines() == [f"no type spec found for {src}"]
