"""
Git and editor integration for gcm.

Thin wrappers around ``git diff --staged``, ``git commit`` and the user's
editor. Each one turns a failed command into the matching gcm exception.
"""

from __future__ import annotations

import os
import shlex
import tempfile
from typing import List, Optional

from .errors import CommitError, DiffReadError, EditorError
from .utils import SubprocessHandler, logger

DEFAULT_EDITOR = "nano"


def read_staged_diff(handler: Optional[SubprocessHandler] = None) -> str:
    """Return the staged changes as a unified diff."""
    handler = handler or SubprocessHandler()
    try:
        stdout, stderr, code = handler.run_command(["git", "diff", "--staged"])
    except (OSError, TimeoutError) as exc:
        raise DiffReadError(f"failed to execute git: {exc}") from exc
    if code != 0:
        raise DiffReadError(stderr.strip() or f"git diff exited with status {code}")
    return stdout


def commit(message: str, handler: Optional[SubprocessHandler] = None) -> str:
    """Create a commit from the staged changes and return git's output."""
    handler = handler or SubprocessHandler()
    try:
        stdout, stderr, code = handler.run_command(["git", "commit", "-m", message])
    except (OSError, TimeoutError) as exc:
        raise CommitError(f"failed to execute git: {exc}") from exc
    if code != 0:
        raise CommitError((stderr or stdout).strip() or f"git commit exited with status {code}")
    logger.debug("git commit output: %s", stdout.strip())
    return stdout


def editor_command(default: str = DEFAULT_EDITOR) -> List[str]:
    """Resolve ``$EDITOR`` (which may carry arguments) or fall back to ``default``."""
    editor = os.environ.get("EDITOR", "").strip() or default
    return shlex.split(editor)


def open_editor(path: str, handler: Optional[SubprocessHandler] = None,
                default: str = DEFAULT_EDITOR) -> None:
    """Open ``path`` in the user's editor and wait for it to close."""
    handler = handler or SubprocessHandler()
    command = editor_command(default) + [path]
    try:
        code = handler.run_attached(command)
    except OSError as exc:
        raise EditorError(f"could not start editor {command[0]!r}: {exc}") from exc
    if code != 0:
        raise EditorError(f"editor {command[0]!r} exited with status {code}")


def edit_message(message: str, handler: Optional[SubprocessHandler] = None,
                 default: str = DEFAULT_EDITOR) -> str:
    """Let the user edit ``message`` and return the file contents verbatim.

    The temporary file is removed whether or not the editor succeeds.
    Characters that cannot be written as UTF-8 are replaced.
    """
    path = None
    try:
        try:
            with tempfile.NamedTemporaryFile(
                "w", prefix="commit-msg-", delete=False, encoding="utf-8", errors="replace"
            ) as handle:
                path = handle.name
                handle.write(message)
        except OSError as exc:
            raise EditorError(f"could not write temporary message file: {exc}") from exc

        open_editor(path, handler, default)
        try:
            with open(path, encoding="utf-8", errors="replace", newline="") as handle:
                return handle.read()
        except OSError as exc:
            raise EditorError(f"could not read edited message: {exc}") from exc
    finally:
        if path is not None:
            try:
                os.unlink(path)
            except OSError:
                logger.debug("Temporary file %s already removed", path)
