"""Parser for the tagged output of the generation models.

The models answer in two parts::

    <reasoning>
    free-form explanation of the change
    </reasoning>
    feat: the proposed commit message

Anything before the opening tag is noise. The reasoning is only shown to the
user while it streams in; the text after the closing tag is the message.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple

REASONING_START = "<reasoning>"
REASONING_END = "</reasoning>"


class Section(Enum):
    NORMAL = "normal"
    REASONING = "reasoning"
    COMMIT = "commit"


# (current section, marker seen) -> next section. Never moves backwards.
TRANSITIONS: Dict[Tuple[Section, str], Section] = {
    (Section.NORMAL, REASONING_START): Section.REASONING,
    (Section.NORMAL, REASONING_END): Section.COMMIT,
    (Section.REASONING, REASONING_START): Section.REASONING,
    (Section.REASONING, REASONING_END): Section.COMMIT,
    (Section.COMMIT, REASONING_START): Section.COMMIT,
    (Section.COMMIT, REASONING_END): Section.COMMIT,
}


@dataclass
class ParsedOutput:
    """Reasoning and message extracted from one model run."""

    reasoning: str = ""
    message: str = ""


def markers_in(line: str) -> List[str]:
    """Return the markers contained in ``line`` in order of appearance."""
    found = []
    for marker in (REASONING_START, REASONING_END):
        position = line.find(marker)
        if position != -1:
            found.append((position, marker))
    return [marker for _, marker in sorted(found)]


class TaggedStreamParser:
    """Separates a streamed model answer into reasoning and message.

    Args:
        on_reasoning: Called with every reasoning line as soon as it arrives,
            unless echo is suppressed for a run.
    """

    def __init__(self, on_reasoning: Optional[Callable[[str], None]] = None) -> None:
        self.on_reasoning = on_reasoning

    def consume(self, lines: Iterable[str], suppress_echo: bool = False) -> ParsedOutput:
        """Read ``lines`` to the end and return what was found.

        The message is empty when the stream never reached the closing tag.
        Errors raised by ``lines`` itself (for instance a
        :class:`~gcm.errors.ProcessError`) propagate unchanged.
        """
        section = Section.NORMAL
        reasoning = []
        message = []

        for raw_line in lines:
            line = raw_line.rstrip("\r\n")

            markers = markers_in(line)
            if markers:
                for marker in markers:
                    section = TRANSITIONS[(section, marker)]
                continue

            if section is Section.REASONING:
                reasoning.append(line + "\n")
                if not suppress_echo and self.on_reasoning is not None:
                    self.on_reasoning(line)
            elif section is Section.COMMIT:
                message.append(line + "\n")

        return ParsedOutput(reasoning="".join(reasoning), message="".join(message).strip())
