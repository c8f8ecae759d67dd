"""
Flavr - Error taxonomy.

Early-tier errors (CacheLookupError, TemplateGenerationError) are caught by
the orchestrator and trigger descent to the next tier. GenerationError is
terminal and reaches the caller. GenerationTimeoutError never leaves the
orchestrator: it is always retried once against the fallback backend.
"""


class FlavrError(Exception):
    """Base class for all pipeline errors."""


class CacheLookupError(FlavrError):
    """The shared recipe store could not be queried."""


class TemplateGenerationError(FlavrError):
    """Template-tier generation failed or produced an unusable recipe."""


class GenerationError(FlavrError):
    """External-service failure or a response that could not be repaired."""


class GenerationTimeoutError(GenerationError, TimeoutError):
    """A generation call exceeded its wall-clock budget."""


class RecipeValidationError(FlavrError):
    """
    A recipe payload failed schema validation.

    Attributes:
        fields: Names of the missing or invalid fields
    """

    def __init__(self, fields: list[str], message: str | None = None):
        self.fields = fields
        super().__init__(message or f"Invalid recipe payload: {', '.join(fields)}")
