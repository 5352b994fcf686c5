"""
gcm: Reasoned Git Commit Message Generator

Key Features:
    - Splits the staged diff into one chunk per file
    - Lets a local reasoning model explain every chunk, streaming its
      reasoning live, and write a micro commit message for it
    - Merges the micro messages into one cohesive commit message,
      retrying empty answers a bounded number of times
    - Interactive review: commit, edit in $EDITOR, regenerate with extra
      context, or discard

Usage:
    Stage your changes and run inside the repository:
    $ gcm

    The tool will:
    1. Read the staged diff
    2. Generate a micro message for each changed file
    3. Combine them into the final commit message
    4. Let you commit, edit, regenerate or discard it

Commands:
    - [c]: Commit with this message
    - [e]: Edit this message
    - [g]: Generate again with some context
    - [d]: Discard
"""

__version__ = "1.0.0"

from .main import run

__all__ = ['run', '__version__']
