"""Final commit message generation.

The micro messages of all chunks, plus whatever context the user typed, are
folded into one prompt for the merge model. The merge model is known to
return nothing now and then, so empty answers are retried a bounded number
of times before giving up with :class:`~gcm.errors.GenerationExhausted`.
"""

import time

from gcm.config import MAX_ATTEMPTS
from gcm.display import Presenter
from gcm.engine import GenerationEngine, Profile
from gcm.errors import GenerationExhausted, ProcessError
from gcm.stream import TaggedStreamParser
from gcm.utils import logger

FINAL_INPUT_TEMPLATE = """
### Commits:
{micro_messages}

### Extra user input context:
{context}
"""


def build_final_input(micro_messages: str, context: str) -> str:
    """Interpolate the aggregated micro messages and context into the merge prompt."""
    return FINAL_INPUT_TEMPLATE.format(micro_messages=micro_messages, context=context)


class FinalMessageGenerator:
    """Merges micro messages into the final commit message, with retries."""

    def __init__(self, engine: GenerationEngine, presenter: Presenter,
                 attempts: int = MAX_ATTEMPTS, retry_delay: float = 1.0,
                 verbose: bool = False) -> None:
        self.engine = engine
        self.presenter = presenter
        self.attempts = min(attempts, MAX_ATTEMPTS)
        self.retry_delay = retry_delay
        self.verbose = verbose
        self.parser = TaggedStreamParser(on_reasoning=self._echo_reasoning)

    def _echo_reasoning(self, line: str) -> None:
        self.presenter.type_out(line, indent="  ")

    def attempt(self, final_input: str, suppress_echo: bool = False) -> str:
        """Run the merge model once; an engine failure counts as an empty answer."""
        try:
            result = self.parser.consume(self.engine.stream(Profile.MERGE, final_input), suppress_echo)
        except ProcessError as e:
            logger.info("Final message generation failed: %s", e)
            self.presenter.error(str(e))
            return ""
        return result.message

    def generate(self, micro_messages: str, context: str = "",
                 suppress_echo: bool = False) -> str:
        """Return the final commit message.

        Raises:
            GenerationExhausted: If every attempt produced an empty message.
        """
        final_input = build_final_input(micro_messages, context)

        if self.verbose:
            self.presenter.label(f"Final Input to {self.engine.name}:")
            self.presenter.show_line(final_input)

        if not suppress_echo:
            self.presenter.show_line("")

        for attempt in range(1, self.attempts + 1):
            message = self.attempt(final_input, suppress_echo)
            if message:
                logger.debug("Final message generated on attempt %d", attempt)
                self._show_verbose_result(final_input, message)
                return message

            logger.info("Attempt %d/%d returned an empty message", attempt, self.attempts)
            if attempt < self.attempts:
                if self.verbose:
                    self.presenter.error("Failed to generate a commit message. Retrying...")
                time.sleep(self.retry_delay)

        raise GenerationExhausted(self.attempts)

    def _show_verbose_result(self, final_input: str, message: str) -> None:
        if not self.verbose:
            return
        self.presenter.label(f"Final Input to {self.engine.name}:")
        self.presenter.show_line(final_input)
        self.presenter.separator()
        self.presenter.label("Generated Final Commit Message:")
        self.presenter.show_line(message)
        self.presenter.separator()
