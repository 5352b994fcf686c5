"""Interactive review of the generated commit message.

After a message is proposed the user picks one option at a time until the
message is committed, discarded, or an invalid choice aborts the review::

    PROPOSED --c--> COMMITTED
    PROPOSED --e--> EDITING ------> PROPOSED
    PROPOSED --g--> REGENERATING -> PROPOSED
    PROPOSED --d--> DISCARDED
    PROPOSED --?--> ABORTED

A failed commit or a failed editor run also returns to PROPOSED.
"""

from enum import Enum
from typing import Callable, FrozenSet, Iterable, List

from gcm.display import Presenter
from gcm.errors import CommitError, EditorError, GenerationExhausted, InvalidChoice
from gcm.generator import FinalMessageGenerator
from gcm.utils import logger

COMMIT = "c"
EDIT = "e"
REGENERATE = "g"
DISCARD = "d"

OPTIONS = (COMMIT, EDIT, REGENERATE, DISCARD)

CONTEXT_PROMPT = "Provide additional context for the commit (optional, press Enter to skip):"


class State(Enum):
    PROPOSED = "proposed"
    EDITING = "editing"
    REGENERATING = "regenerating"
    COMMITTED = "committed"
    DISCARDED = "discarded"
    ABORTED = "aborted"


TERMINAL_STATES = frozenset({State.COMMITTED, State.DISCARDED, State.ABORTED})


def request_context(presenter: Presenter) -> str:
    """Ask the user for optional free-text context."""
    presenter.info(CONTEXT_PROMPT)
    return presenter.prompt("")


class InteractionController:
    """Runs the commit / edit / regenerate / discard loop.

    Args:
        generator: Used to regenerate the message with new context.
        presenter: Console front-end for options and prompts.
        committer: Creates the commit; raises ``CommitError`` on failure.
        editor: Returns the edited message; raises ``EditorError`` on failure.
        base_excluded: Option letters that are never offered in this run.
    """

    def __init__(self, generator: FinalMessageGenerator, presenter: Presenter,
                 committer: Callable[[str], object], editor: Callable[[str], str],
                 base_excluded: Iterable[str] = ()) -> None:
        self.generator = generator
        self.presenter = presenter
        self.committer = committer
        self.editor = editor
        self.base_excluded: FrozenSet[str] = frozenset(base_excluded)

        self.state = State.PROPOSED
        self.message = ""
        self.micro_messages = ""
        self.context = ""
        self.exhausted = False

    @property
    def excluded(self) -> FrozenSet[str]:
        """Letters currently unavailable; a failed generation also removes commit."""
        if self.exhausted:
            return self.base_excluded | {COMMIT}
        return self.base_excluded

    def available_options(self) -> List[str]:
        return [option for option in OPTIONS if option not in self.excluded]

    def validate_choice(self, choice: str) -> str:
        if choice not in OPTIONS or choice in self.excluded:
            raise InvalidChoice(choice)
        return choice

    def run(self, message: str, micro_messages: str, context: str = "",
            exhausted: bool = False) -> State:
        """Loop until a terminal state is reached and return it."""
        self.state = State.PROPOSED
        self.message = message
        self.micro_messages = micro_messages
        self.context = context
        self.exhausted = exhausted

        while self.state not in TERMINAL_STATES:
            if self.state is State.PROPOSED:
                self.state = self._propose()
            elif self.state is State.EDITING:
                self.state = self._edit()
            elif self.state is State.REGENERATING:
                self.state = self._regenerate()

        logger.debug("Interaction finished in state %s", self.state.value)
        return self.state

    def _propose(self) -> State:
        self.presenter.show_options(self.available_options())
        choice = self.presenter.prompt("Choose: ")
        try:
            choice = self.validate_choice(choice)
        except InvalidChoice as e:
            logger.info("%s", e)
            self.presenter.error("Invalid option. Aborting.")
            return State.ABORTED

        if choice == COMMIT:
            return self._commit()
        if choice == EDIT:
            return State.EDITING
        if choice == REGENERATE:
            return State.REGENERATING
        self.presenter.error("Commit discarded.")
        return State.DISCARDED

    def _commit(self) -> State:
        self.presenter.info("Committing with the following message:")
        self.presenter.show_line(self.message)
        try:
            self.committer(self.message)
        except CommitError as e:
            logger.info("Commit failed: %s", e)
            self.presenter.show_line(str(e), style="red")
            self.presenter.error("Commit failed. Please check the errors above.")
            return State.PROPOSED
        self.presenter.success("Commit created successfully!")
        return State.COMMITTED

    def _edit(self) -> State:
        self.presenter.info("Opening editor to edit the commit message...")
        try:
            edited = self.editor(self.message)
        except EditorError as e:
            logger.info("Editor failed: %s", e)
            self.presenter.error(f"Error with editor: {e}")
            return State.PROPOSED

        # Edited text is kept exactly as written.
        self.message = edited
        if edited.strip():
            self.exhausted = False

        self.presenter.header("Updated Commit Message")
        self.presenter.show_line(self.message)
        return State.PROPOSED

    def _regenerate(self) -> State:
        self.presenter.info("Generating again with some context...")
        self.context = request_context(self.presenter)
        try:
            self.message = self.generator.generate(self.micro_messages, self.context)
        except GenerationExhausted as e:
            logger.info("%s", e)
            self.presenter.error("Failed to generate a commit message.")
            self.message = ""
            self.exhausted = True
            return State.PROPOSED

        self.exhausted = False
        self.presenter.header("Final Commit Message")
        self.presenter.type_message(self.message)
        return State.PROPOSED
