from lbasic.types import ErrorVal


class BasicError(Exception):
    """Exception type used to propagate BASIC lexing and runtime errors."""
    def __init__(self, err: ErrorVal):
        super().__init__(f"BasicError: {err.name}: {err.message}")
        self.err = err

    @property
    def name(self) -> str:
        return self.err.name


def fail(name: str, message: str) -> BasicError:
    """Build a `BasicError` for the given taxonomy name."""
    return BasicError(ErrorVal(name, message))
