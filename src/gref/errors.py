from __future__ import annotations


class GrefError(Exception):
    """
    Base class for every error raised by gref.
    """


class MissingInputError(GrefError):
    """
    A mandatory algorithm input (database or seed lattice) is absent.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"missing mandatory input: {name}")


class MatchFailure(GrefError):
    """
    A single pattern vs database-graph comparison could not be computed.
    """

    def __init__(self, message: str, *, graph_index: int | None = None) -> None:
        self.graph_index = graph_index
        super().__init__(message)


class DuplicateEdgeViolation(GrefError):
    """
    Inserting a generalization edge would close a cycle in the lattice.
    """

    def __init__(self, general: int, specific: int) -> None:
        self.general = general
        self.specific = specific
        super().__init__(
            f"edge {general} -> {specific} would introduce a cycle"
        )


class LatticeFrozenError(GrefError):
    """
    The lattice is read-only because its search has terminated.
    """


class MatcherNotReady(GrefError):
    """
    The matcher was handed to an algorithm before initialize() was called.
    """


class GraphParseError(GrefError):
    def __init__(self, message: str, *, line_no: int | None = None) -> None:
        self.line_no = line_no
        if line_no is not None:
            message = f"line {line_no}: {message}"
        super().__init__(message)


class LabelMapError(GrefError):
    def __init__(self, path: str, line_no: int) -> None:
        self.path = path
        self.line_no = line_no
        super().__init__(f"file {path} has a problem at line {line_no}")
