# lpmodel : a python library for building and solving linear programs

# Copyright (c) 2024 Ke Shi

# Licensed under GNU LGPL.3


class ModelError(Exception):
    """Base class of the errors raised while building a model."""


class DuplicateNameError(ModelError):
    """Raised when a variable or constraint name is already used in the model."""


class InvalidBoundsError(ModelError):
    """Raised when a variable is given a lower bound above its upper bound."""


class UnknownVariableError(ModelError):
    """Raised when an expression references a variable the model does not own."""


class SolutionUnavailableError(Exception):
    """Raised when reading values from a solution that is not optimal."""
