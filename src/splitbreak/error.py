"""
exceptions raised by the splitbreak package
"""
class FormatError(ValueError):
    """
    raised when chimeric alignment or cigar text cannot be parsed
    """

    pass


class InvalidStateError(Exception):
    """
    raised when a precondition of a derivation is violated. For example, deriving
    evidence from an unmapped read where the orientation is undefined
    """

    pass


class InvalidInputError(ValueError):
    """
    raised for arguments outside the supported range, such as an unsupported k-mer size
    """

    pass
