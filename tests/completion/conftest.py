"""
Fixtures for completion tests.
"""

import sys
from importlib import import_module
from pathlib import Path

import pytest


def _path_import(root: Path, target: str):
    module_path, separator, attr_name = target.partition(":")
    if not separator or not module_path or not attr_name:
        raise ValueError(f"Invalid import target: {target!r}")

    original_sys_path = list(sys.path)
    try:
        sys.path.insert(0, str(root))
        module = import_module(module_path)
        return getattr(module, attr_name)
    finally:
        sys.path[:] = original_sys_path


FishHarnessResult = _path_import(
    Path(__file__).parent, "fish_harness:FishHarnessResult"
)
FishHarnessConfig = _path_import(
    Path(__file__).parent, "fish_harness:FishHarnessConfig"
)
FishHarnessRunner = _path_import(
    Path(__file__).parent, "fish_harness:FishHarnessRunner"
)


@pytest.fixture
def fish_harness(tmp_path):
    """
    Create a fish harness that mocks the completed program and captures what the
    completion script offers.

    Returns a function that runs a completion script against a command line and
    returns a FishHarnessResult.
    """
    runner = FishHarnessRunner(tmp_path)
    runner.__enter__()

    def run(
        script: str,
        commandline: str,
        host_output: list[str] | None = None,
        mock_files: list[str] | None = None,
        debug_file: Path | None = None,
    ) -> FishHarnessResult:
        """
        Run a fish completion script for a program named prog.

        Args:
            script: The fish completion script to test
            commandline: The command line to complete, e.g. "prog eat ap"
            host_output: Lines the mocked host prints, directive line included
            mock_files: Files offered by the stubbed file completion
            debug_file: Value for BASH_COMP_DEBUG_FILE
        """
        config = FishHarnessConfig(
            commandline=commandline,
            host_output=host_output or [],
            mock_files=mock_files or [],
            debug_file=debug_file,
        )
        return runner.run(script, config)

    yield run

    runner.__exit__(None, None, None)
