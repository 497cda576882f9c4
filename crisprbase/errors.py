"""
Exception types raised by crisprbase.

All errors derive from ValueError so callers can keep catching ValueError
at their boundary, as the command-line interface does.
"""

from typing import Optional


class CrisprBaseError(ValueError):
    """Base class for all crisprbase errors."""


class InvalidAlphabet(CrisprBaseError):
    """Motif notation contains characters outside the allowed set."""


class InvalidMotifGrammar(CrisprBaseError):
    """Motif notation does not follow the recognition-site grammar."""


class ConflictingCutSpecification(CrisprBaseError):
    """More than one way of specifying the cleavage position was used."""


class InvalidNucleaseDefinition(CrisprBaseError):
    """A nuclease field failed validation.

    Attributes:
        field: Name of the offending field (e.g. 'weights', 'pam_side')
    """

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Invalid '{field}': {message}")


class UndefinedCutSite(CrisprBaseError):
    """A cut site was requested for a motif without cleavage information."""


class SequenceTooShort(CrisprBaseError):
    """Target sequence is shorter than PAM + spacer gap + spacer."""


class InvariantViolation(CrisprBaseError):
    """A computed interval failed its own consistency check."""


class InvalidAnchor(CrisprBaseError):
    """A (chromosome, PAM site, strand) anchor is malformed.

    Attributes:
        index: Position of the anchor in the input batch, if known
    """

    def __init__(self, message: str, index: Optional[int] = None):
        self.index = index
        if index is not None:
            message = f"Anchor {index}: {message}"
        super().__init__(message)


class UnknownNuclease(CrisprBaseError, KeyError):
    """No nuclease with the requested name is registered."""

    def __str__(self) -> str:
        return ValueError.__str__(self)
