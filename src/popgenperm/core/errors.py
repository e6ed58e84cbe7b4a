"""
Error taxonomy for population sample containers.

Every failure in the container layer is a PopulationDataError subclass that
also derives from the closest builtin exception, so callers can catch either
the domain type (GroupNotFoundError) or the generic one (LookupError).

Error Context:
    Container operations delegate downward (DataSet -> Group -> Individual ->
    MultilocusGenotype). The innermost object knows which parameter was bad
    ("locus_position"), the outermost knows which public operation was called
    ("DataSet.get_individual_monolocus_genotype_in_group"). Instead of catching
    and re-raising at every boundary, each delegating layer wraps its call in
    error_context(), which stamps the operation name and prepends a path
    segment on the way out:

        >>> with error_context("DataSet.get_group_at_position"):
        ...     registry.get_at(7)
        IndexOutOfRangeError: DataSet.get_group_at_position: group_position 7
        out of range [0, 3)

    The outermost context runs last, so the reported operation is always the
    public entry point.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Optional

__all__ = [
    'PopulationDataError',
    'DuplicateIdentifierError',
    'NotFoundError',
    'LocalityNotFoundError',
    'GroupNotFoundError',
    'IndividualNotFoundError',
    'LocusNotFoundError',
    'AlleleNotFoundError',
    'SequenceNotFoundError',
    'IndexOutOfRangeError',
    'PreconditionError',
    'AlphabetMismatchError',
    'DimensionError',
    'PloidyError',
    'error_context',
    'error_scope',
]


class PopulationDataError(Exception):
    """Base class for all container and resampling errors.

    Attributes:
        message: Description of the violation, without operation prefix
        identifier: Offending identifier, if any
        field: Name of the offending parameter (e.g. "individual_position")
        operation: Public operation that was called (set by error_context)
        path: Scopes traversed from the outermost caller to the violation
    """

    def __init__(
        self,
        message: str,
        *,
        identifier: Any = None,
        field: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.identifier = identifier
        self.field = field
        self.operation = operation
        self.path: tuple[str, ...] = ()

    def __str__(self) -> str:
        parts = []
        if self.operation:
            parts.append(f"{self.operation}: ")
        if self.path:
            parts.append(f"[{' > '.join(self.path)}] ")
        parts.append(self.message)
        return "".join(parts)


class DuplicateIdentifierError(PopulationDataError, ValueError):
    """Raised when adding an id/name that already exists at that level."""

    def __init__(self, what: str, identifier: Any, **kwargs):
        super().__init__(f"{what} {identifier!r} already in use", identifier=identifier, **kwargs)


class NotFoundError(PopulationDataError, LookupError):
    """Raised when an identifier-based lookup has no match."""

    kind = "entity"

    def __init__(self, identifier: Any, **kwargs):
        super().__init__(f"{self.kind} {identifier!r} not found", identifier=identifier, **kwargs)


class LocalityNotFoundError(NotFoundError):
    kind = "locality"


class GroupNotFoundError(NotFoundError):
    kind = "group"


class IndividualNotFoundError(NotFoundError):
    kind = "individual"


class LocusNotFoundError(NotFoundError):
    kind = "locus"


class AlleleNotFoundError(NotFoundError):
    kind = "allele"


class SequenceNotFoundError(NotFoundError):
    kind = "sequence"


class IndexOutOfRangeError(PopulationDataError, IndexError):
    """Raised on positional access beyond the current count.

    Attributes:
        index: The offending position
        bounds: Valid half-open range (low, high)
    """

    def __init__(self, index: int, bounds: tuple[int, int], field: str = "position", **kwargs):
        super().__init__(
            f"{field} {index} out of range [{bounds[0]}, {bounds[1]})",
            identifier=index,
            field=field,
            **kwargs,
        )
        self.index = index
        self.bounds = bounds


class PreconditionError(PopulationDataError, RuntimeError):
    """Raised when operating on uninitialized or locked state."""


class AlphabetMismatchError(PopulationDataError, ValueError):
    """Raised when a sequence alphabet disagrees with the established one."""

    def __init__(self, expected: str, got: str, **kwargs):
        super().__init__(f"alphabet mismatch: expected {expected!r}, got {got!r}", **kwargs)
        self.alphabets = (expected, got)


class DimensionError(PopulationDataError, ValueError):
    """Raised when a size or count is unsuitable for the operation."""


class PloidyError(DimensionError):
    """Raised when a genotype's allele count disagrees with its locus ploidy."""


@contextmanager
def error_context(operation: str, scope: Optional[str] = None) -> Iterator[None]:
    """Attribute errors raised inside the block to a public operation.

    Args:
        operation: Qualified name of the public entry point
        scope: Optional path segment describing where the block descended
            (e.g. "group[2]"); prepended to the error's path

    Raises:
        PopulationDataError: The original exception, re-raised with
            operation and path updated
    """
    try:
        yield
    except PopulationDataError as exc:
        exc.operation = operation
        if scope is not None:
            exc.path = (scope,) + exc.path
        raise


@contextmanager
def error_scope(scope: str) -> Iterator[None]:
    """Prepend a path segment to errors raised inside the block.

    Used by internal helpers that descend a level without being a public
    entry point themselves; the operation is left to the enclosing
    error_context().
    """
    try:
        yield
    except PopulationDataError as exc:
        exc.path = (scope,) + exc.path
        raise
