"""Generation engines that turn a prompt into a stream of output lines.

Two profiles exist: ``CHUNK`` reasons about a single file diff and
``MERGE`` folds the per-chunk messages into one commit message. Both answer
with the ``<reasoning>`` tagged protocol understood by
:class:`gcm.stream.TaggedStreamParser`.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterator, List, Optional

from g4f.client import Client  # type: ignore

from gcm.config import Config
from gcm.display import Presenter
from gcm.errors import ProcessError
from gcm.utils import SubprocessHandler, logger


class Profile(Enum):
    CHUNK = "chunk"
    MERGE = "merge"


TAGGED_FORMAT = """Answer in exactly this format:
<reasoning>
Your step-by-step analysis, one thought per line.
</reasoning>
The commit message, in conventional commit style, and nothing else."""

SYSTEM_PROMPTS = {
    Profile.CHUNK: (
        "You are an expert software engineer reviewing a single file of a git diff. "
        "Work out what changed and why, then write a concise commit message for it.\n\n"
        + TAGGED_FORMAT
    ),
    Profile.MERGE: (
        "You are an expert software engineer. You receive several small commit messages "
        "describing parts of one change, optionally followed by context from the author. "
        "Merge them into a single cohesive commit message with a short subject line and "
        "an optional bullet list body.\n\n" + TAGGED_FORMAT
    ),
}


class GenerationEngine(ABC):
    """Abstract base for generation backends."""

    @abstractmethod
    def stream(self, profile: Profile, prompt: str) -> Iterator[str]:
        """Start a generation and return its output lines as they arrive.

        Raises:
            ProcessError: If the backend cannot be started.
        """

    @property
    @abstractmethod
    def name(self) -> str:
        pass


class OllamaEngine(GenerationEngine):
    """Runs the local ``ollama`` CLI, one process per generation."""

    def __init__(self, config: Config, handler: Optional[SubprocessHandler] = None) -> None:
        self.config = config
        self.handler = handler or SubprocessHandler()

    @property
    def name(self) -> str:
        return "Ollama"

    def model_for(self, profile: Profile) -> str:
        if profile is Profile.CHUNK:
            return self.config.chunk_model
        return self.config.merge_model

    def stream(self, profile: Profile, prompt: str) -> Iterator[str]:
        return self.handler.stream_lines(["ollama", "run", self.model_for(profile), prompt])

    def models(self) -> List[str]:
        return [self.config.merge_model, self.config.chunk_model]


class G4FEngine(GenerationEngine):
    """Streams a chat completion from g4f and re-assembles it into lines."""

    def __init__(self, config: Config, client: Optional[Client] = None) -> None:
        self.config = config
        self.client = client or Client()

    @property
    def name(self) -> str:
        return f"g4f ({self.config.g4f_model_name})"

    def stream(self, profile: Profile, prompt: str) -> Iterator[str]:
        try:
            response = self.client.chat.completions.create(
                model=self.config.g4f_model_name,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPTS[profile]},
                    {"role": "user", "content": prompt},
                ],
                stream=True,
            )
        except Exception as e:
            raise ProcessError(f"Error starting g4f completion: {e!s}") from e
        return self._iter_lines(response)

    @staticmethod
    def _iter_lines(response) -> Iterator[str]:
        buffer = ""
        try:
            for chunk in response:
                if not chunk.choices:
                    continue
                buffer += chunk.choices[0].delta.content or ""
                while "\n" in buffer:
                    line, buffer = buffer.split("\n", 1)
                    yield line
        except Exception as e:
            raise ProcessError(f"g4f stream interrupted: {e!s}") from e
        if buffer:
            yield buffer


def create_engine(config: Config, handler: Optional[SubprocessHandler] = None) -> GenerationEngine:
    """Build the engine selected in ``config``."""
    if config.engine == "g4f":
        return G4FEngine(config)
    return OllamaEngine(config, handler)


def update_models(engine: GenerationEngine, presenter: Presenter, quiet: bool = False) -> None:
    """Pull the newest version of every Ollama model the engine uses.

    Failures of the individual pulls are logged and otherwise ignored. With
    ``quiet`` set nothing is written to stdout.
    """
    if not isinstance(engine, OllamaEngine):
        if not quiet:
            presenter.warning(f"{engine.name} has no local models to update.")
        return

    if not quiet:
        presenter.info("Updating Ollama model...")
    for model in engine.models():
        try:
            returncode = engine.handler.run_attached(["ollama", "pull", model], quiet=quiet)
        except OSError as e:
            logger.debug("ollama pull %s could not start: %s", model, e)
            continue
        if returncode:
            logger.debug("ollama pull %s exited with status %s", model, returncode)
    if not quiet:
        presenter.success("Model updated successfully!")
