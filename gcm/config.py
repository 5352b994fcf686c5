"""Configuration module for gcm.

This module provides a configuration class that holds all the settings
for the commit message generator.
"""

from typing import Optional, Union

import g4f  # type: ignore

# Type alias for the supported g4f model types
MODEL_TYPE = Union[g4f.Model, str]

ENGINES = ("ollama", "g4f")

DEFAULT_CHUNK_MODEL = "tavernari/git-commit-message:reasoning"
DEFAULT_MERGE_MODEL = "tavernari/git-commit-message:merge_commits"
DEFAULT_G4F_MODEL = "gpt-4o-mini"

# Hard ceiling on final-message attempts
MAX_ATTEMPTS = 10


class Config:
    """Configuration class for gcm.

    This class holds all the configuration settings for the commit message generator.
    It can be instantiated with default values or customized values.

    Attributes:
        only_message: Print only the final commit message, without UI or commit.
        verbose: Show chunks, micro messages and the final prompt.
        update: Pull the generation models before running.
        engine: Generation backend, one of ``ENGINES``.
        chunk_model: Ollama model used to reason about a single chunk.
        merge_model: Ollama model used to merge micro messages.
        g4f_model: Model used when the engine is ``g4f``. Can be a g4f.Model object
              or a model name.
        attempts: Number of attempts to generate the final commit message.
        retry_delay: Seconds to wait after an empty final message before retrying.
        type_delay: Seconds per character for the typed-out rendering.
        default_editor: Editor used when ``$EDITOR`` is not set.
        git_timeout: Optional timeout in seconds for git commands.
    """

    def __init__(
        self,
        only_message: bool = False,
        verbose: bool = False,
        update: bool = False,
        engine: str = "ollama",
        chunk_model: str = DEFAULT_CHUNK_MODEL,
        merge_model: str = DEFAULT_MERGE_MODEL,
        g4f_model: MODEL_TYPE = DEFAULT_G4F_MODEL,
        attempts: int = MAX_ATTEMPTS,
        retry_delay: float = 1.0,
        type_delay: float = 0.002,
        default_editor: str = "nano",
        git_timeout: Optional[int] = None,
    ):
        """Initialize the configuration with the given values.

        Raises:
            ValueError: If any value is out of range or of the wrong type.
        """
        self.only_message: bool = only_message
        self.verbose: bool = verbose
        self.update: bool = update
        self.engine: str = engine
        self.chunk_model: str = chunk_model
        self.merge_model: str = merge_model
        self.g4f_model: MODEL_TYPE = g4f_model
        self.attempts: int = attempts
        self.retry_delay: float = retry_delay
        self.type_delay: float = type_delay
        self.default_editor: str = default_editor
        self.git_timeout: Optional[int] = git_timeout

        error = self._validation_error()
        if error:
            raise ValueError(f"Invalid configuration: {error}")

    def _validation_error(self) -> Optional[str]:
        for name in ("only_message", "verbose", "update"):
            if not isinstance(getattr(self, name), bool):
                return f"{name} must be a boolean value"
        if self.engine not in ENGINES:
            return f"engine must be one of {', '.join(ENGINES)}"
        for name in ("chunk_model", "merge_model", "default_editor"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                return f"{name} must be a non-empty string"
        if not isinstance(self.g4f_model, (str, g4f.Model)) or not self.g4f_model:
            return "g4f_model must be a model name or a g4f.Model"
        if isinstance(self.attempts, bool) or not isinstance(self.attempts, int):
            return "attempts must be an integer"
        if not 1 <= self.attempts <= MAX_ATTEMPTS:
            return f"attempts must be between 1 and {MAX_ATTEMPTS}"
        for name in ("retry_delay", "type_delay"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                return f"{name} must be a non-negative number"
        if self.git_timeout is not None and (
            isinstance(self.git_timeout, bool)
            or not isinstance(self.git_timeout, int)
            or self.git_timeout <= 0
        ):
            return "git_timeout must be a positive integer or None"
        return None

    def is_valid(self) -> bool:
        """Return True when every setting is within its allowed range."""
        return self._validation_error() is None

    @property
    def g4f_model_name(self) -> str:
        """Model name as understood by the g4f client."""
        if isinstance(self.g4f_model, str):
            return self.g4f_model
        return self.g4f_model.name


# Default configuration instance
default_config = Config()
