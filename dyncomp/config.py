from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, fields, replace
from os import environ
from pathlib import Path
from typing import Any

from .exceptions import ConfigValidationError, DynCompException


@dataclass(frozen=True)
class DynCompConfig:
    """
    Settings shared by the completion interpreter and the script emitters.

    Values are resolved from defaults, then a config file, then the environment,
    with explicit CLI options applied on top by the app.
    """

    include_descriptions: bool = True
    nospace_sentinel: str = "."
    debug_file: str | None = None
    timeout: float | None = None
    verbosity: int = 0

    """
    The filenames to look for when loading config
    """
    config_filenames: Sequence[str] = ("pyproject.toml", "dyncomp.toml")

    @classmethod
    def load(
        cls,
        target_path: Path | str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> "DynCompConfig":
        config = cls()
        for config_file in config.find_config_files(target_path):
            table = config._read_table(config_file)
            if table is None:
                # A pyproject.toml without a tool.dyncomp table
                continue
            config = config.with_table(table, config_file)
            break
        return config.with_env(environ if env is None else env)

    def find_config_files(
        self, target_path: Path | str | None = None
    ) -> Iterator[Path]:
        """
        Generate candidate config files in order of precedence. If target_path is a
        file then only it is used, otherwise look for each of the config_filenames in
        the target directory (defaulting to the current working directory).
        """
        target = Path(target_path) if target_path else Path()
        target = target.resolve()

        if target.is_file():
            yield target
            return

        if target_path and not target.exists():
            raise DynCompException(
                f"Could not find a config file at the given location: {target_path}"
            )

        for filename in self.config_filenames:
            candidate = target.joinpath(filename)
            if candidate.is_file():
                yield candidate

    def with_table(
        self, table: Mapping[str, Any], filename: Path | str | None = None
    ) -> "DynCompConfig":
        filename = str(filename) if filename else None
        known = {
            config_field.name: config_field
            for config_field in fields(self)
            if config_field.name != "config_filenames"
        }
        updates: dict[str, Any] = {}

        for key, value in table.items():
            option = key.replace("-", "_")
            if option not in known:
                raise ConfigValidationError(
                    f"Unrecognised option {key!r}", option=key, filename=filename
                )
            updates[option] = self._validate_option(option, value, filename)

        return replace(self, **updates)

    def with_env(self, env: Mapping[str, str]) -> "DynCompConfig":
        updates: dict[str, Any] = {}
        if env.get("BASH_COMP_DEBUG_FILE"):
            updates["debug_file"] = env["BASH_COMP_DEBUG_FILE"]
        if env.get("DYNCOMP_DEBUG", "0") == "1":
            updates["verbosity"] = 3
        return replace(self, **updates) if updates else self

    @staticmethod
    def _validate_option(option: str, value: Any, filename: str | None) -> Any:
        def invalid(expected: str):
            return ConfigValidationError(
                f"Option {option!r} must be {expected}, got {value!r}",
                option=option,
                filename=filename,
            )

        if option == "include_descriptions":
            if not isinstance(value, bool):
                raise invalid("a boolean")
        elif option == "nospace_sentinel":
            if not isinstance(value, str) or len(value) != 1 or value.isspace():
                raise invalid("a single non-whitespace character")
        elif option == "debug_file":
            if not isinstance(value, str):
                raise invalid("a string")
        elif option == "timeout":
            if (
                isinstance(value, bool)
                or not isinstance(value, (int, float))
                or value <= 0
            ):
                raise invalid("a positive number")
            value = float(value)
        elif option == "verbosity":
            if isinstance(value, bool) or not isinstance(value, int):
                raise invalid("an integer")
            if not -2 <= value <= 3:
                raise invalid("between -2 and 3")
        return value

    def _read_table(self, path: Path) -> Mapping[str, Any] | None:
        """
        Returns None if the file is a pyproject.toml with no tool.dyncomp table, so
        that it doesn't shadow a dyncomp.toml alongside it.
        """
        content = self._read_config_file(path)
        if path.name == "pyproject.toml":
            table = content.get("tool", {}).get("dyncomp")
            if table is None:
                return None
        else:
            table = content.get("tool", {}).get("dyncomp", content)

        if not isinstance(table, Mapping):
            raise ConfigValidationError(
                "Expected a table of dyncomp options", filename=str(path)
            )
        return table

    @staticmethod
    def _read_config_file(path: Path) -> Mapping[str, Any]:
        try:
            import tomllib as tomli
        except ImportError:
            import tomli  # type: ignore[no-redef]

        try:
            with path.open("rb") as file:
                return tomli.load(file)
        except tomli.TOMLDecodeError as error:
            raise DynCompException(
                f"Couldn't parse toml file at {path}", error
            ) from error
        except OSError as error:
            raise DynCompException(f"Couldn't open file at {path}") from error
