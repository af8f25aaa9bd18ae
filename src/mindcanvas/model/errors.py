"""
Model Exceptions
================
Errors raised by the mind-map model. None of them is fatal: the interaction
controller reports them to the user and leaves the state untouched.
"""


class MindMapError(Exception):
    """Base class for all mind-map model errors."""


class StructuralError(MindMapError):
    """Invalid mutation of the node tree (e.g. a child under a level-2 node)."""


class InputError(MindMapError, ValueError):
    """Empty or otherwise unusable user input."""


class RecordNotFound(MindMapError, KeyError):
    """A stored mind map with the requested id does not exist."""

    def __str__(self) -> str:
        # KeyError quotes its argument, we want a readable message
        return str(self.args[0]) if self.args else "Record not found"
