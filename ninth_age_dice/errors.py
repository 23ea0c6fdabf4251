"""Exceptions raised by the simulation engine"""


class SimulationError(Exception):
    """Base class for all engine errors"""


class DiceExpressionError(SimulationError, ValueError):
    """A dice expression could not be parsed or asks for an unsupported die"""

    def __init__(self, expression, reason=None):
        self.expression = expression
        message = f"Invalid dice expression: {expression}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class InvalidThresholdError(SimulationError, ValueError):
    """A threshold outside 2-6, 'auto' or 'none'"""


class InvalidParameterError(SimulationError, ValueError):
    """Any other malformed simulation parameter"""
