import re
from pathlib import Path
from typing import TYPE_CHECKING

from ..exceptions import ConfigValidationError, DynCompException
from ..protocol.directive import Directive
from ..protocol.filters import NOSPACE_SENTINEL
from ..protocol.request import request_token

if TYPE_CHECKING:
    from ..config import DynCompConfig

_VALID_PROGRAM_NAME = re.compile(r"^[A-Za-z0-9._+:-]+$")


def fish_identifier(name: str) -> str:
    """Function names derived from the program name must not contain - or :"""
    return name.replace("-", "_").replace(":", "_")


def fish_quote(value: str) -> str:
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def validate_program_name(name: str) -> str:
    if not name or not _VALID_PROGRAM_NAME.match(name) or name.startswith("-"):
        raise ConfigValidationError(
            f"Invalid program name {name!r}, expected letters, digits or ._+:-",
            option="program",
        )
    return name


def get_fish_completion_script(
    name: str,
    include_descriptions: bool | None = None,
    config: "DynCompConfig | None" = None,
) -> str:
    """
    Render a fish script that completes `name` by asking the program itself for
    candidates via its hidden completion sub-command.

    The script follows the same decision procedure as ResponseInterpreter, with the
    directive bit values interpolated from Directive.
    """
    name = validate_program_name(name)
    if include_descriptions is None:
        include_descriptions = config.include_descriptions if config else True
    sentinel = config.nospace_sentinel if config else NOSPACE_SENTINEL

    fid = fish_identifier(name)
    comp_cmd = request_token(include_descriptions)

    return "\n".join(
        (
            f"# fish completion for {name:<36} -*- shell-script -*-",
            "",
            f"function __{fid}_debug",
            '    set -l file "$BASH_COMP_DEBUG_FILE"',
            '    if test -n "$file"',
            '        echo "$argv" >> $file',
            "    end",
            "end",
            "",
            f"function __{fid}_has_flag",
            '    test (math "floor($argv[1] / $argv[2]) % 2") -eq 1',
            "end",
            "",
            f"function __{fid}_file_completion",
            f'    __{fid}_debug "Requesting file completion"',
            "    __fish_complete_path (commandline -ct)",
            "end",
            "",
            f"function __{fid}_perform_completion",
            f'    __{fid}_debug "Starting __{fid}_perform_completion"',
            "",
            "    # Tokens before the cursor, and the token being completed",
            "    set -l args (commandline -opc)",
            "    set -l lastArg (commandline -ct)",
            "",
            f'    __{fid}_debug "args: $args"',
            f'    __{fid}_debug "last arg: $lastArg"',
            "",
            '    if not type -q -- "$args[1]"',
            "        # This can happen when the lazy loading trigger below runs",
            f'        __{fid}_debug "Cannot find $args[1]. No completions."',
            "        return",
            "    end",
            "",
            "    # An empty lastArg is passed as an explicit empty argument",
            f'    __{fid}_debug "Calling $args[1] {comp_cmd} $args[2..-1]'
            " '$lastArg'\"",
            f"    set -l results ($args[1] {comp_cmd} $args[2..-1] \"$lastArg\""
            " 2> /dev/null)",
            "    if test (count $results) -eq 0",
            "        return",
            "    end",
            "",
            "    # When completing a flag with an = (e.g., <program> -n=<TAB>)",
            "    # completions must be prefixed with the flag",
            "    set -l flagPrefix (string match -r -- '-.*=' \"$lastArg\")",
            "",
            f'    __{fid}_debug "Comps: $results[1..-2]"',
            f'    __{fid}_debug "DirectiveLine: $results[-1]"',
            f'    __{fid}_debug "flagPrefix: $flagPrefix"',
            "",
            "    for comp in $results[1..-2]",
            '        printf "%s%s\\n" "$flagPrefix" "$comp"',
            "    end",
            '    printf "%s\\n" "$results[-1]"',
            "end",
            "",
            f"function __{fid}_complete",
            f'    __{fid}_debug ""',
            f'    __{fid}_debug "========= starting completion logic =========="',
            "",
            f"    set -l results (__{fid}_perform_completion)",
            f'    __{fid}_debug "Completion results: $results"',
            "",
            "    if test (count $results) -eq 0",
            f'        __{fid}_debug "No completion, probably due to a failure"',
            "        # Might as well do file completion, in case it helps",
            f"        __{fid}_file_completion",
            "        return",
            "    end",
            "",
            "    # Surrounding whitespace and the leading colon are both optional",
            "    set -l directive (string trim -- \"$results[-1]\")",
            "    set directive (string replace -r -- '^:' '' \"$directive\")",
            "    set -l comps $results[1..-2]",
            "    if not string match -q -r -- '^[0-9]+$' \"$directive\"",
            "        set directive 0",
            "    end",
            "",
            f'    __{fid}_debug "Completions are: $comps"',
            f'    __{fid}_debug "Directive is: $directive"',
            "",
            f"    if __{fid}_has_flag $directive {int(Directive.ERROR)}",
            f'        __{fid}_debug "Received error directive: aborting."',
            "        # Might as well do file completion, in case it helps",
            f"        __{fid}_file_completion",
            "        return",
            "    end",
            "",
            f"    if __{fid}_has_flag $directive {int(Directive.FILTER_FILE_EXT)}"
            f"; or __{fid}_has_flag $directive {int(Directive.FILTER_DIRS)}",
            f'        __{fid}_debug "File extension filtering or directory filtering'
            ' not supported"',
            "        # Do full file completion instead",
            f"        __{fid}_file_completion",
            "        return",
            "    end",
            "",
            "    set -l nospace 0",
            "    set -l nofiles 0",
            f"    __{fid}_has_flag $directive {int(Directive.NO_SPACE)}"
            "; and set nospace 1",
            f"    __{fid}_has_flag $directive {int(Directive.NO_FILE_COMP)}"
            "; and set nofiles 1",
            f'    __{fid}_debug "nospace: $nospace, nofiles: $nofiles"',
            "",
            "    # If we want to prevent a space, or if file completion is NOT",
            "    # disabled, we need to count the number of valid completions.",
            "    # The host may match on looser criteria than a prefix, so keep only",
            "    # completions that literally start with the current token.",
            "    if test $nospace -eq 1; or test $nofiles -eq 0",
            "        set -l prefix (commandline -ct)",
            f'        __{fid}_debug "prefix: $prefix"',
            "",
            "        set -l completions",
            "        for comp in $comps",
            '            if test -z "$prefix"',
            "                set -a completions $comp",
            "                continue",
            "            end",
            "            set -l value (string split --max 1 \\t -- $comp)[1]",
            "            set -l head (string sub --length (string length -- "
            '"$prefix") -- "$value")',
            '            if test "$head" = "$prefix"',
            "                set -a completions $comp",
            "            end",
            "        end",
            "",
            "        set -l numComps (count $completions)",
            f'        __{fid}_debug "Filtered completions are: $completions"',
            f'        __{fid}_debug "numComps: $numComps"',
            "",
            "        if test $numComps -eq 1; and test $nospace -eq 1",
            "            # To support the nospace directive we trick the shell",
            "            # by outputting an extra, longer completion.",
            "            # The description is dropped since the extra character",
            "            # must come before it.",
            f'            __{fid}_debug "Adding second completion to perform nospace'
            ' directive"',
            "            set -l split (string split --max 1 \\t -- $completions[1])",
            f'            set completions $split[1] "$split[1]"{fish_quote(sentinel)}',
            "        end",
            "",
            "        if test $numComps -eq 0; and test $nofiles -eq 0",
            "            # Only trigger file completion when there are no other",
            "            # completions",
            f"            __{fid}_file_completion",
            "            return",
            "        end",
            "",
            "        set comps $completions",
            "    end",
            "",
            "    if test (count $comps) -gt 0",
            '        printf "%s\\n" $comps',
            "    end",
            "end",
            "",
            "# Since fish completions are only loaded once the user triggers them, we",
            "# trigger them ourselves so we can delete any completions provided by",
            "# another script. The space after the program name is essential.",
            f'complete --do-complete "{name} " > /dev/null 2>&1',
            "",
            "# Remove any pre-existing completions for the program since we will be",
            "# handling all of them.",
            f"complete -c {name} -e",
            "",
            f"complete -c {name} -f -a '(__{fid}_complete)'",
            "",
        )
    )


def write_fish_completion_file(
    path: Path | str,
    name: str,
    include_descriptions: bool | None = None,
    config: "DynCompConfig | None" = None,
) -> Path:
    script = get_fish_completion_script(name, include_descriptions, config)
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(script, encoding="utf-8")
    except OSError as error:
        raise DynCompException(
            f"Couldn't write {target}: {error.strerror}"
        ) from error
    return target
