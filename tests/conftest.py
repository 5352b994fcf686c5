import io
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import git
import pytest
from rich.console import Console

from gcm.display import Presenter
from gcm.engine import GenerationEngine, Profile


def tagged(reasoning: str, message: str, preamble: str = "") -> List[str]:
    """Build model output lines in the ``<reasoning>`` tagged format."""
    lines = preamble.splitlines()
    lines.append("<reasoning>")
    lines.extend(reasoning.splitlines())
    lines.append("</reasoning>")
    lines.extend(message.splitlines())
    return lines


class FakeEngine(GenerationEngine):
    """Scripted engine: each profile replays its outputs, repeating the last one."""

    def __init__(self, chunk: Optional[List] = None, merge: Optional[List] = None) -> None:
        self.outputs: Dict[Profile, List] = {
            Profile.CHUNK: list(chunk or [[]]),
            Profile.MERGE: list(merge or [[]]),
        }
        self.calls = []

    @property
    def name(self) -> str:
        return "Fake"

    def stream(self, profile: Profile, prompt: str) -> Iterable[str]:
        self.calls.append((profile, prompt))
        queue = self.outputs[profile]
        output = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(output, Exception):
            raise output
        return iter(output)

    def prompts(self, profile: Profile) -> List[str]:
        return [prompt for called, prompt in self.calls if called is profile]


class ScriptedPresenter(Presenter):
    """Presenter writing to a buffer and answering prompts from a script."""

    def __init__(self, answers: Iterable[str] = ()) -> None:
        super().__init__(
            Console(file=io.StringIO(), width=120, color_system=None, force_terminal=False),
            type_delay=0,
        )
        self.answers = list(answers)
        self.prompts: List[str] = []

    def prompt(self, text: str) -> str:
        self.prompts.append(text)
        return self.answers.pop(0).strip()

    @property
    def output(self) -> str:
        return self.console.file.getvalue()


@pytest.fixture
def presenter() -> ScriptedPresenter:
    return ScriptedPresenter()


@pytest.fixture
def no_sleep(monkeypatch):
    """Record retry sleeps instead of waiting."""
    sleeps = []
    monkeypatch.setattr("gcm.generator.time.sleep", sleeps.append)
    return sleeps


@pytest.fixture
def two_file_diff() -> str:
    return (
        "diff --git a/calc.py b/calc.py\n"
        "index 83db48f..bf269f4 100644\n"
        "--- a/calc.py\n"
        "+++ b/calc.py\n"
        "@@ -1,2 +1,3 @@\n"
        " def add(a, b):\n"
        "     return a + b\n"
        "+\n"
        "diff --git a/docs/api.md b/docs/api.md\n"
        "new file mode 100644\n"
        "--- /dev/null\n"
        "+++ b/docs/api.md\n"
        "@@ -0,0 +1 @@\n"
        "+# API\n"
    )


@pytest.fixture
def temp_git_repo(tmp_path, monkeypatch) -> git.Repo:
    """Create a temporary Git repository with one commit and chdir into it."""
    repo = git.Repo.init(tmp_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()
    repo.config_writer().set_value("commit", "gpgsign", "false").release()

    readme = Path(tmp_path) / "README.md"
    readme.write_text("# Project\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")

    monkeypatch.chdir(tmp_path)
    return repo
