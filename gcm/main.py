"""
gcm: Reasoned Git Commit Message Generator

Flow of one run:
    1. Read the staged diff (``git diff --staged``)
    2. Split it into one chunk per file
    3. Let the reasoning model write a micro message for every chunk,
       typing its reasoning out live
    4. Merge the micro messages into the final commit message, retrying
       empty answers
    5. Let the user commit, edit, regenerate or discard the message

With ``only_message`` set, steps 1-4 run silently and the final message is
printed instead of being committed.
"""

import functools
from typing import Optional

from gcm.config import Config, default_config
from gcm.diff import split_diff
from gcm.display import Presenter
from gcm.engine import GenerationEngine, create_engine, update_models
from gcm.errors import DiffReadError, GenerationExhausted, InputError
from gcm.generator import FinalMessageGenerator
from gcm.git import commit, edit_message, read_staged_diff
from gcm.interaction import InteractionController, State, request_context
from gcm.processor import ChunkProcessor
from gcm.utils import SubprocessHandler, logger

EXIT_OK = 0
EXIT_FAILURE = 1


def get_staged_diff(handler: SubprocessHandler) -> str:
    """Return the staged diff, refusing to continue when nothing is staged."""
    diff = read_staged_diff(handler)
    if not diff:
        raise InputError("No changes detected. Please stage your changes first.")
    return diff


def display_diff(presenter: Presenter, diff: str) -> None:
    presenter.boxed_title("Diff")
    presenter.show_diff(diff)


def display_final_message(presenter: Presenter, message: str) -> None:
    presenter.header("Final Commit Message")
    presenter.type_message(message)


def create_controller(config: Config, generator: FinalMessageGenerator,
                      presenter: Presenter, handler: SubprocessHandler) -> InteractionController:
    """Wire the review loop to git and the editor."""
    return InteractionController(
        generator,
        presenter,
        committer=functools.partial(commit, handler=handler),
        editor=functools.partial(edit_message, handler=handler, default=config.default_editor),
    )


def run(config: Optional[Config] = None, presenter: Optional[Presenter] = None,
        engine: Optional[GenerationEngine] = None,
        handler: Optional[SubprocessHandler] = None) -> int:
    """Run one full generation and review cycle and return the exit status."""
    config = config or default_config
    presenter = presenter or Presenter(type_delay=config.type_delay)
    handler = handler or SubprocessHandler(timeout=config.git_timeout)
    engine = engine or create_engine(config, handler)
    quiet = config.only_message

    if config.update:
        update_models(engine, presenter, quiet=quiet)

    if not quiet:
        presenter.banner()

    try:
        diff = get_staged_diff(handler)
    except DiffReadError as e:
        logger.info("git diff failed: %s", e)
        presenter.error(f"Error getting staged changes: {e}")
        return EXIT_FAILURE
    except InputError as e:
        presenter.error(str(e))
        return EXIT_FAILURE

    context = ""
    if not quiet:
        display_diff(presenter, diff)
        context = request_context(presenter)
        presenter.header("Reasoning")

    chunks = split_diff(diff)
    logger.debug("Split staged diff into %d chunks", len(chunks))

    processor = ChunkProcessor(engine, presenter, verbose=config.verbose)
    micro_messages = processor.process_all(chunks, context, suppress_echo=quiet)

    generator = FinalMessageGenerator(
        engine,
        presenter,
        attempts=config.attempts,
        retry_delay=config.retry_delay,
        verbose=config.verbose,
    )

    try:
        message = generator.generate(micro_messages, context, suppress_echo=quiet)
    except GenerationExhausted as e:
        logger.info("%s", e)
        presenter.error("Failed to generate a commit message.")
        if quiet:
            return EXIT_FAILURE
        controller = create_controller(config, generator, presenter, handler)
        controller.run("", micro_messages, context, exhausted=True)
        return EXIT_OK

    if quiet:
        presenter.show_line(message)
        return EXIT_OK

    display_final_message(presenter, message)

    controller = create_controller(config, generator, presenter, handler)
    state = controller.run(message, micro_messages, context)
    if state is State.ABORTED:
        logger.info("Review aborted by an invalid choice")
    return EXIT_OK
