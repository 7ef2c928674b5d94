"""
Exceptions raised by fieldsweep.

Only ConfigurationError and NoRowsError end an experiment. EmptyIndex and
ProviderFailure end one combination; the runner records them on that
combination's result and moves on.
"""


class FieldSweepError(Exception):
    """Base class for all fieldsweep errors."""


class ConfigurationError(FieldSweepError):
    """The experiment configuration is invalid; nothing was run."""

    def __init__(self, problems: list[str] | str):
        if isinstance(problems, str):
            problems = [problems]
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


class InvalidFieldSet(ConfigurationError):
    """The candidate field set is empty or too large to enumerate."""


class NoRowsError(FieldSweepError):
    """The row source returned no rows at all."""


class UnknownTableError(FieldSweepError):
    """The row source has no table with the requested name."""


class EmptyIndex(FieldSweepError):
    """No training row survived for a combination."""


class ProviderFailure(FieldSweepError):
    """The embedding provider raised while building an index."""
