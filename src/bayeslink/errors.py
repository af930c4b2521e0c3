"""Exception taxonomy for bayeslink.

Setup-time problems are ``ConfigurationError`` subclasses and abort the run
before any matching work starts. ``RecordError`` is the only error the
linkage processor isolates per record.
"""

__all__ = [
    "BayesLinkError",
    "ConfigurationError",
    "DuplicatePropertyNameError",
    "InvalidGroupError",
    "UnreachableThresholdError",
    "UnknownPropertyError",
    "BackendError",
    "ComparatorContractError",
    "RecordError",
]


class BayesLinkError(Exception):
    """Base class for all bayeslink errors."""


class ConfigurationError(BayesLinkError):
    """Raised when the configuration is malformed or inconsistent."""


class DuplicatePropertyNameError(ConfigurationError):
    """Raised when two properties share a name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Duplicate property name: {name!r}")
        self.name = name


class InvalidGroupError(ConfigurationError):
    """Raised for a data source group number other than 0, 1 or 2."""

    def __init__(self, group: object) -> None:
        super().__init__(f"Invalid group number: {group!r} (expected 0, 1 or 2)")
        self.group = group


class UnreachableThresholdError(ConfigurationError):
    """Raised when no combination of evidence can reach the threshold."""

    def __init__(self, best: float, threshold: float) -> None:
        super().__init__(
            f"Maximum possible probability is {best}, which is below threshold "
            f"({threshold}), which means no duplicates will ever be found"
        )
        self.best = best
        self.threshold = threshold


class UnknownPropertyError(BayesLinkError, KeyError):
    """Raised when a property is looked up by a name that does not exist."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown property: {self.name!r}"


class BackendError(BayesLinkError):
    """Raised when the record database backend fails (I/O, storage)."""


class ComparatorContractError(BayesLinkError):
    """Raised when a comparator returns a score outside [0, 1]."""


class RecordError(BayesLinkError):
    """Raised for a single malformed record.

    Attributes
    ----------
    rid : str | None
        Identifier of the offending record, when one could be derived.
    """

    def __init__(self, message: str, rid: str | None = None) -> None:
        super().__init__(message)
        self.rid = rid
