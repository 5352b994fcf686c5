"""Per-chunk processing for gcm.

Each file chunk of the staged diff is sent to the reasoning model on its own.
The model's reasoning is typed out live as it streams in; the short message
that follows it becomes the chunk's micro message.
"""

from typing import List

from gcm.display import Presenter
from gcm.engine import GenerationEngine, Profile
from gcm.errors import ProcessError
from gcm.stream import TaggedStreamParser
from gcm.utils import logger

MICRO_MESSAGE_SEPARATOR = "----"
CONTEXT_LABEL = "User Extra Context Input: "


def build_chunk_input(chunk: str, context: str = "") -> str:
    """Append the user's context, if any, to a chunk."""
    if context:
        return f"{chunk}\n\n{CONTEXT_LABEL}{context}"
    return chunk


def aggregate_micro_messages(messages: List[str]) -> str:
    """Join micro messages into blocks closed by the separator line."""
    return "".join(f"\n{message}\n{MICRO_MESSAGE_SEPARATOR}\n" for message in messages)


class ChunkProcessor:
    """Generates one micro message per diff chunk, strictly one after another."""

    def __init__(self, engine: GenerationEngine, presenter: Presenter, verbose: bool = False) -> None:
        """Initialize the chunk processor.

        Args:
            engine: Backend used with the ``CHUNK`` profile.
            presenter: Console front-end for the live reasoning transcript.
            verbose: Whether to show each chunk and its micro message.
        """
        self.engine = engine
        self.presenter = presenter
        self.verbose = verbose
        self.parser = TaggedStreamParser(on_reasoning=self._echo_reasoning)

    def _echo_reasoning(self, line: str) -> None:
        self.presenter.type_out(line, indent="  ")

    def process(self, chunk: str, context: str = "", suppress_echo: bool = False) -> str:
        """Return the micro message for ``chunk``, or ``""`` if none was produced."""
        prompt = build_chunk_input(chunk, context)
        try:
            result = self.parser.consume(self.engine.stream(Profile.CHUNK, prompt), suppress_echo)
        except ProcessError as e:
            logger.info("Chunk generation failed: %s", e)
            self.presenter.error(str(e))
            return ""
        if not result.message:
            logger.info("Chunk produced an empty micro message")
        return result.message

    def process_all(self, chunks: List[str], context: str = "",
                    suppress_echo: bool = False) -> str:
        """Process every chunk in order and return the aggregated micro messages.

        A chunk that fails still contributes an empty block.
        """
        messages: List[str] = []
        total = len(chunks)

        for index, chunk in enumerate(chunks, start=1):
            if not suppress_echo:
                self.presenter.show_line(" ")

            if self.verbose:
                self.presenter.label(f"Chunk {index}/{total}:")
                self.presenter.show_diff(chunk)
                self.presenter.separator()

            message = self.process(chunk, context, suppress_echo)

            if self.verbose:
                self.presenter.label(f"Generated Micro Message for Chunk {index}:")
                self.presenter.show_line(message)
                self.presenter.separator()

            messages.append(message)

        return aggregate_micro_messages(messages)
