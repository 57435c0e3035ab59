"""Composition of validation failures.

ValidationResult accumulates failures from several independent checks:

    result = ValidationResult()
    result.add_error(validate_field(user.name, "Name", "required,gte=3"))
    result.add_error(validate(user.address))
    if not result.is_valid():
        return result.err()

FieldError values are appended, FieldErrors are flattened and None is
ignored. Any other error is raised: it signals a failure that is not a
validation result and must not disappear inside one.
"""

from structval.types import FieldError, FieldErrors


def _flatten(err: BaseException | None) -> list[FieldError]:
    if err is None:
        return []
    if isinstance(err, FieldErrors):
        return list(err.errors)
    if isinstance(err, FieldError):
        return [err]
    if isinstance(err, BaseException):
        raise err
    raise TypeError(f"expected an error or None, got {type(err).__name__}")


class ValidationResult:
    """Mutable accumulator of field failures.

    Attributes:
        errors: Collected failures in the order they were added
    """

    def __init__(self, *errs: BaseException | None):
        self.errors: list[FieldError] = []
        self.add_errors(*errs)

    def add_error(self, err: BaseException | None) -> None:
        """Add a FieldError, the entries of a FieldErrors, or nothing for None.

        Raises:
            Exception: Any other error passed in is re-raised unchanged
        """
        self.errors.extend(_flatten(err))

    def add_errors(self, *errs: BaseException | None) -> None:
        for err in errs:
            self.add_error(err)

    def is_valid(self) -> bool:
        """Return False if one or more errors have been added."""
        return not self.errors

    def err(self) -> FieldErrors | None:
        """Return the collected failures, or None when valid."""
        if self.is_valid():
            return None
        return FieldErrors(self.errors)

    def __str__(self) -> str:
        if self.is_valid():
            return ""
        return str(FieldErrors(self.errors))

    def __repr__(self) -> str:
        return f"ValidationResult({self.errors!r})"


def combine_fields(*results: BaseException | None) -> FieldErrors | None:
    """Combine single-field results into one FieldErrors.

    Args:
        *results: Outcomes of ``validate_field`` calls (FieldError or None)

    Returns:
        FieldErrors of the failures in argument order, or None if none failed
    """
    return ValidationResult(*results).err()
