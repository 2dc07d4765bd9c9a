# ruff: noqa: N818
class DynCompException(RuntimeError):
    cause: str | None

    def __init__(self, msg, *args):
        super().__init__(msg, *args)
        self.msg = msg

        if args:
            cause = args[0]
            position_clause = (
                f", near line {cause.lineno}, column {cause.colno}."
                if getattr(cause, "lineno", None) is not None
                else "."
            )
            self.cause = str(cause.args[0]) + position_clause
        else:
            self.cause = None


class ConfigValidationError(DynCompException):
    option: str | None
    filename: str | None

    def __init__(
        self,
        msg,
        *args,
        option: str | None = None,
        filename: str | None = None,
    ):
        super().__init__(msg, *args)
        self.option = option
        self.filename = filename


class RequestError(DynCompException):
    pass


class ExecutionError(RuntimeError):
    cause: str | None

    def __init__(self, msg, *args):
        self.msg = msg
        self.cause = str(args[0]) if args else None
        self.args = (msg, *args)


class HostInvocationError(ExecutionError):
    """
    The host program could not be located or executed. The interpreter turns this
    into a file completion fallback rather than letting it reach the shell.
    """
