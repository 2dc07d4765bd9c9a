import json
import os
import stat
import sys
from collections.abc import Mapping, Sequence
from io import StringIO
from pathlib import Path
from typing import NamedTuple, Optional

import pytest

from dyncomp.app import DynComp
from dyncomp.config import DynCompConfig
from dyncomp.io import DynCompIO

PROJECT_ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture(scope="session")
def is_windows():
    return sys.platform == "win32"


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    # Settings from the environment of whoever runs the tests must not leak in
    monkeypatch.delenv("BASH_COMP_DEBUG_FILE", raising=False)
    monkeypatch.delenv("DYNCOMP_DEBUG", raising=False)
    monkeypatch.delenv("DYNCOMP_PROJECT_DIR", raising=False)
    DynCompIO._default_io = None


@pytest.fixture
def quiet_io():
    return DynCompIO(output=StringIO(), error=StringIO(), ansi=False)


class DynCompRunResult(NamedTuple):
    code: int
    path: str
    capture: str
    stdout: str
    stderr: str

    def __str__(self):
        return (
            "DynCompRunResult(\n"
            f"  code={self.code!r},\n"
            f"  path={self.path},\n"
            f"  capture=`{self.capture}`,\n"
            f"  stdout=`{self.stdout}`,\n"
            f"  stderr=`{self.stderr}`,\n"
            ")"
        )


@pytest.fixture
def run_dyncomp(capsys, tmp_path):
    def run_dyncomp(
        *run_args: str,
        cwd: Optional[Path] = None,
        config: Optional[DynCompConfig] = None,
        program_name: str = "dyncomp",
        env: Optional[Mapping[str, str]] = None,
        runner=None,
    ) -> DynCompRunResult:
        cwd = cwd or tmp_path
        output_capture = StringIO()
        app = DynComp(
            cwd=cwd,
            config=config,
            output=output_capture,
            program_name=program_name,
            env=env if env is not None else {},
            runner=runner,
        )
        result = app(("--no-ansi", *run_args))
        output_capture.seek(0)
        run_result = DynCompRunResult(
            result, str(cwd), output_capture.read(), *capsys.readouterr()
        )
        print(run_result)  # when a test fails this is usually useful to debug
        return run_result

    return run_dyncomp


@pytest.fixture
def run_dyncomp_main(capsys, tmp_path, monkeypatch):
    def run_dyncomp_main(*cli_args: str, cwd: Optional[Path] = None):
        from dyncomp import main

        monkeypatch.chdir(cwd or tmp_path)
        monkeypatch.setattr(sys, "argv", ["dyncomp", "--no-ansi", *cli_args])
        try:
            main()
            code = 0
        except SystemExit as exit_:
            code = exit_.code
        return DynCompRunResult(code, str(cwd or tmp_path), "", *capsys.readouterr())

    return run_dyncomp_main


class FakeHost(NamedTuple):
    path: Path
    calls_file: Path

    @property
    def calls(self) -> list[list[str]]:
        if not self.calls_file.exists():
            return []
        return [
            json.loads(line)
            for line in self.calls_file.read_text().splitlines()
            if line
        ]


@pytest.fixture
def make_host(tmp_path, is_windows):
    """
    Create an executable that records its arguments and prints the given output,
    standing in for a program that implements the completion sub-command.
    """
    if is_windows:
        pytest.skip("Fake host executables rely on a shebang line")

    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)

    def make_host(
        output: str | Sequence[str],
        name: str = "myhost",
        stderr: str = "",
        exit_code: int = 0,
    ) -> FakeHost:
        if not isinstance(output, str):
            output = "".join(f"{line}\n" for line in output)

        calls_file = tmp_path / f"{name}.calls"
        host_path = bin_dir / name
        host_path.write_text(
            "\n".join(
                (
                    f"#!{sys.executable}",
                    "import json, sys",
                    f"with open({str(calls_file)!r}, 'a') as calls:",
                    "    calls.write(json.dumps(sys.argv[1:]) + '\\n')",
                    f"sys.stdout.write({output!r})",
                    f"sys.stderr.write({stderr!r})",
                    f"sys.exit({exit_code})",
                    "",
                )
            )
        )
        host_path.chmod(host_path.stat().st_mode | stat.S_IEXEC)
        return FakeHost(host_path, calls_file)

    return make_host


@pytest.fixture
def host_on_path(monkeypatch, tmp_path):
    """Put the fake hosts directory first on PATH so hosts resolve by name"""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    return bin_dir
