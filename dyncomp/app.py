from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import IO, TYPE_CHECKING

from .exceptions import DynCompException, ExecutionError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from .config import DynCompConfig
    from .io import DynCompIO
    from .protocol.interpreter import HostRunner
    from .ui import DynCompUi


class DynComp:
    """
    :param cwd:
        The directory to take as the current working directory, this determines where
        to look for a config file, defaults to ``Path().resolve()``
    :type cwd: Path, optional

    :param config:
        A DynCompConfig to use instead of loading config from a file and the
        environment.
    :type config: DynCompConfig, optional

    :param output:
        A stream for the application to write its own output to, defaults to sys.stdout
    :type output: IO, optional

    :param program_name:
        The name of the program that is being run. This is used primarily when
        outputting help messages, defaults to "dyncomp"
    :type program_name: str, optional

    :param env:
        Optionally provide an alternative environment to read settings from. If no
        mapping is provided then ``os.environ`` is used.
    :type env: dict, optional

    :param runner:
        Optionally replace the function used to execute the host program when
        running the ``complete`` command.
    :type runner: Callable, optional
    """

    cwd: Path
    ui: DynCompUi
    config: DynCompConfig | None

    def __init__(
        self,
        cwd: Path | str | None = None,
        config: DynCompConfig | None = None,
        output: DynCompIO | IO = sys.stdout,
        program_name: str = "dyncomp",
        env: Mapping[str, str] | None = None,
        runner: HostRunner | None = None,
    ):
        from .io import DynCompIO
        from .ui import DynCompUi

        self.cwd = Path(cwd) if cwd else Path().resolve()
        self.config = config

        self.io = (
            DynCompIO(parent=output, make_default=True)
            if isinstance(output, DynCompIO)
            else DynCompIO(output=output, error=output, make_default=True)
        )

        self.ui = DynCompUi(io=self.io, program_name=program_name)
        self._env = env if env is not None else os.environ
        self._runner = runner

    def __call__(self, cli_args: Sequence[str]) -> int:
        """
        :param cli_args:
            A sequence of command line arguments to pass to dyncomp (i.e. sys.argv[1:])
        """

        self.ui.parse_args(cli_args)

        if self.ui["version"]:
            self.ui.print_version()
            return 0

        if self.ui["help"]:
            self.ui.print_help()
            return 0

        if not self.ui["command"]:
            self.ui.print_help(info="No command specified.")
            return 1

        try:
            config = self.load_config()
        except DynCompException as error:
            self.ui.print_help(error=error)
            return 1

        try:
            if self.ui["command"] == "fish":
                return self.generate_fish(config)
            return self.complete(config)
        except DynCompException as error:
            self.ui.print_help(error=error)
            return 1
        except ExecutionError as error:
            self.ui.print_error(error=error)
            return 1

    def load_config(self) -> DynCompConfig:
        from .config import DynCompConfig

        if self.config is None:
            target_path = self.ui["project_root"] or self._env.get(
                "DYNCOMP_PROJECT_DIR"
            )
            self.config = DynCompConfig.load(
                self.cwd.joinpath(target_path) if target_path else self.cwd,
                env=self._env,
            )

        self.io.configure(
            baseline=self.config.verbosity, debug_file=self.config.debug_file
        )
        return self.config

    def generate_fish(self, config: DynCompConfig) -> int:
        from .completion.fish import (
            get_fish_completion_script,
            write_fish_completion_file,
        )

        program = self.ui["program"]
        include_descriptions = self.ui["include_descriptions"]

        if self.ui["output_file"]:
            target = write_fish_completion_file(
                self.cwd.joinpath(self.ui["output_file"]),
                program,
                include_descriptions,
                config,
            )
            self.io.print(f"Wrote fish completion script for <em>{program}</em>")
            self.io.print_debug("Script written to %s", target)
            return 0

        self.io.write_raw(
            get_fish_completion_script(program, include_descriptions, config), end=""
        )
        return 0

    def complete(self, config: DynCompConfig) -> int:
        """
        Run the completion negotiation for the given words, printing the resulting
        candidates. Returns 1 if the shell should fall back to file completion.
        """
        from .protocol.interpreter import ResponseInterpreter
        from .protocol.request import CompletionRequest

        include_descriptions = self.ui["include_descriptions"]
        if include_descriptions is None:
            include_descriptions = config.include_descriptions

        request = CompletionRequest.from_words(
            self.ui["words"] or [], include_descriptions
        )
        interpreter = ResponseInterpreter(
            config=config, io=self.io, runner=self._runner
        )
        result = interpreter.interpret(request)

        if result.is_fallback:
            self.io.print_debug("Falling back to file completion: %s", result.reason)
            return 1

        for candidate in result.candidates:
            self.io.write_raw(candidate)
        return 0
