"""Exception hierarchy shared by the core and the bot application."""


class RiddleError(Exception):
    """Base class for every error raised by riddler."""


class DefinitionError(RiddleError, ValueError):
    """The submitted riddle document cannot be turned into a definition.

    Raised at creation time only. The message is meant for the riddle's author.
    """


class UnknownStateError(RiddleError, LookupError):
    """A state name was asked for that the definition does not contain."""


class RiddleNotFoundError(RiddleError, LookupError):
    """No riddle is registered under the given code."""


class RiddleExistsError(RiddleError, ValueError):
    """A riddle with the given code is already registered."""


class DeliveryError(RiddleError, RuntimeError):
    """Raised when a message cannot be delivered to a chat."""
