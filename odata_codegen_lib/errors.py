"""
Exception types raised while loading metadata and generating code.
"""

from typing import List, Optional


class CodegenError(Exception):
    """Base class for every error the generator reports."""


class InputError(CodegenError):
    """The metadata document could not be read."""

    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = path
        self.reason = reason
        message = f"failed to read input metadata file at {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ParseError(CodegenError):
    """The metadata document is not a CSDL document the generator understands."""


class OutputError(CodegenError):
    """The generated module could not be written."""

    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = path
        self.reason = reason
        message = f"failed to write output to file {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class NavigationResolutionError(CodegenError):
    """A navigation property whose target role has no usable association end."""

    def __init__(self, entity: str, navigation: str, role: str, reason: str = "no association end carries this role"):
        self.entity = entity
        self.navigation = navigation
        self.role = role
        self.reason = reason
        super().__init__(f"{entity}.{navigation}: cannot resolve role '{role}' ({reason})")


class UnresolvedNavigationError(CodegenError):
    """Every navigation resolution failure of one generation run."""

    def __init__(self, errors: List[NavigationResolutionError]):
        self.errors = list(errors)
        lines = [f"{len(self.errors)} navigation propert{'y' if len(self.errors) == 1 else 'ies'} could not be resolved:"]
        lines.extend(f"  - {error}" for error in self.errors)
        super().__init__("\n".join(lines))
