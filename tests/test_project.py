import json
import subprocess
from pathlib import Path

from rustlings.project import Crate, RustAnalyzerProject


def test_empty_project_json():
    assert RustAnalyzerProject().to_json() == '{"sysroot_src":"","crates":[]}'


def test_crate_defaults():
    crate = Crate(root_module="a.rs")
    assert crate.edition == "2021"
    assert crate.deps == []
    assert crate.cfg == ["test"]


def test_exercises_to_json_collects_rs_files(tmp_path):
    root = tmp_path / "exercises"
    (root / "a").mkdir(parents=True)
    (root / "a" / "b.rs").write_text("")
    (root / "a" / "c.txt").write_text("")
    (root / "d.rs").write_text("")
    project = RustAnalyzerProject()
    project.exercises_to_json(root)
    assert [c.root_module for c in project.crates] == [
        str(root / "a" / "b.rs"),
        str(root / "d.rs"),
    ]
    assert all(c.cfg == ["test"] and c.edition == "2021" for c in project.crates)


def test_exercises_to_json_missing_root(tmp_path):
    project = RustAnalyzerProject()
    project.exercises_to_json(tmp_path / "nowhere")
    assert project.crates == []


def test_write_to_disk_round_trip(tmp_path):
    project = RustAnalyzerProject(sysroot_src="/src", crates=[Crate(root_module="x.rs")])
    target = tmp_path / "rust-project.json"
    project.write_to_disk(target)
    data = json.loads(target.read_text())
    assert data == json.loads(project.to_json())
    assert data["sysroot_src"] == "/src"
    assert data["crates"][0]["root_module"] == "x.rs"
    assert list(data["crates"][0]) == ["root_module", "edition", "deps", "cfg"]


def test_sysroot_from_environment(monkeypatch):
    monkeypatch.setenv("RUST_SRC_PATH", "/custom/src")
    project = RustAnalyzerProject()
    project.get_sysroot_src()
    assert project.sysroot_src == "/custom/src"


def test_sysroot_from_rustc(monkeypatch, capsys):
    monkeypatch.delenv("RUST_SRC_PATH", raising=False)
    calls = []

    def fake_run(args, **kwargs):
        calls.append(list(args))
        return subprocess.CompletedProcess(args, 0, b"/opt/toolchain\n", b"")

    monkeypatch.setattr(subprocess, "run", fake_run)
    project = RustAnalyzerProject()
    project.get_sysroot_src()
    assert calls == [["rustc", "--print", "sysroot"]]
    assert Path(project.sysroot_src) == Path("/opt/toolchain/lib/rustlib/src/rust/library")
    assert "Determined toolchain: /opt/toolchain\n" in capsys.readouterr().out


def test_sysroot_with_empty_rustc_output(monkeypatch, capsys):
    monkeypatch.delenv("RUST_SRC_PATH", raising=False)
    monkeypatch.setattr(
        subprocess, "run", lambda args, **kw: subprocess.CompletedProcess(args, 0, b"", b"")
    )
    project = RustAnalyzerProject()
    project.get_sysroot_src()
    assert Path(project.sysroot_src) == Path("lib/rustlib/src/rust/library")