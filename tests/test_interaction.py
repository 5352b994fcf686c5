from unittest.mock import MagicMock

import pytest

from gcm.engine import Profile
from gcm.errors import CommitError, EditorError, InvalidChoice
from gcm.generator import FinalMessageGenerator, build_final_input
from gcm.interaction import InteractionController, State
from tests.conftest import FakeEngine, ScriptedPresenter, tagged

MICRO = "\nfeat: one\n----\n"


def make_controller(answers, merge=None, base_excluded=(), attempts=10, committer=None, editor=None):
    presenter = ScriptedPresenter(answers)
    engine = FakeEngine(merge=merge or [[]])
    generator = FinalMessageGenerator(engine, presenter, attempts=attempts)
    controller = InteractionController(
        generator,
        presenter,
        committer=committer or MagicMock(),
        editor=editor or MagicMock(),
        base_excluded=base_excluded,
    )
    return controller, presenter, engine


def test_commit(no_sleep):
    controller, presenter, _ = make_controller(["c"])

    state = controller.run("feat: one", MICRO)

    assert state is State.COMMITTED
    controller.committer.assert_called_once_with("feat: one")
    assert "Commit created successfully!" in presenter.output


def test_failed_commit_returns_to_options(no_sleep):
    committer = MagicMock(side_effect=[CommitError("nothing to commit"), None])
    controller, presenter, _ = make_controller(["c", "c"], committer=committer)

    state = controller.run("feat: one", MICRO)

    assert state is State.COMMITTED
    assert committer.call_count == 2
    assert "Commit failed. Please check the errors above." in presenter.output
    assert presenter.output.count("Options:") == 2


def test_discard():
    controller, presenter, _ = make_controller(["d"])

    assert controller.run("feat: one", MICRO) is State.DISCARDED
    controller.committer.assert_not_called()
    assert "Commit discarded." in presenter.output


@pytest.mark.parametrize("choice", ["x", "", "commit", "C"])
def test_invalid_choice_aborts(choice):
    controller, presenter, _ = make_controller([choice])

    assert controller.run("feat: one", MICRO) is State.ABORTED
    assert "Invalid option. Aborting." in presenter.output


def test_edit_keeps_text_untrimmed():
    editor = MagicMock(return_value="  fix: hand written\n\nbody\n\n")
    controller, presenter, _ = make_controller(["e", "c"], editor=editor)

    state = controller.run("feat: one", MICRO)

    assert state is State.COMMITTED
    editor.assert_called_once_with("feat: one")
    controller.committer.assert_called_once_with("  fix: hand written\n\nbody\n\n")
    assert "Updated Commit Message" in presenter.output


def test_editor_failure_keeps_message():
    editor = MagicMock(side_effect=EditorError("editor 'vim' exited with status 1"))
    controller, presenter, _ = make_controller(["e", "c"], editor=editor)

    controller.run("feat: one", MICRO)

    controller.committer.assert_called_once_with("feat: one")
    assert "Error with editor" in presenter.output


def test_regenerate_with_new_context(no_sleep):
    controller, presenter, engine = make_controller(
        ["g", "fix typo", "c"], merge=[tagged("again", "fix: correct typo")]
    )

    state = controller.run("feat: one", MICRO, context="first context")

    assert state is State.COMMITTED
    assert engine.calls == [(Profile.MERGE, build_final_input(MICRO, "fix typo"))]
    controller.committer.assert_called_once_with("fix: correct typo")
    assert controller.context == "fix typo"


def test_each_regeneration_gets_full_attempts(no_sleep):
    controller, _, engine = make_controller(
        ["g", "first", "g", "second", "c"],
        merge=[[], [], [], tagged("ok", "feat: second")],
        attempts=3,
    )

    state = controller.run("feat: one", MICRO)

    assert state is State.COMMITTED
    assert len(engine.calls) == 4
    assert engine.prompts(Profile.MERGE)[:3] == [build_final_input(MICRO, "first")] * 3
    assert engine.prompts(Profile.MERGE)[3] == build_final_input(MICRO, "second")
    controller.committer.assert_called_once_with("feat: second")


def test_exhaustion_excludes_commit():
    controller, presenter, _ = make_controller(["c"])

    state = controller.run("", MICRO, exhausted=True)

    assert controller.excluded == {"c"}
    assert state is State.ABORTED
    controller.committer.assert_not_called()
    assert "(c)" not in presenter.output
    assert "(e)" in presenter.output


def test_exhaustion_adds_to_base_exclusions():
    controller, _, _ = make_controller(["d"], base_excluded={"e"})

    controller.run("", MICRO, exhausted=True)

    assert controller.excluded == {"c", "e"}
    assert controller.available_options() == ["g", "d"]


def test_failed_regeneration_excludes_commit(no_sleep):
    controller, presenter, _ = make_controller(["g", "more", "d"], merge=[[]], attempts=2)

    state = controller.run("feat: one", MICRO)

    assert state is State.DISCARDED
    assert controller.message == ""
    assert controller.exhausted is True
    assert "Failed to generate a commit message." in presenter.output


def test_successful_regeneration_restores_commit(no_sleep):
    controller, _, _ = make_controller(["g", "", "c"], merge=[tagged("ok", "feat: back")])

    state = controller.run("", MICRO, exhausted=True)

    assert state is State.COMMITTED
    controller.committer.assert_called_once_with("feat: back")


def test_manual_message_after_exhaustion_can_be_committed():
    editor = MagicMock(return_value="chore: written by hand\n")
    controller, _, _ = make_controller(["e", "c"], editor=editor)

    state = controller.run("", MICRO, exhausted=True)

    assert state is State.COMMITTED
    controller.committer.assert_called_once_with("chore: written by hand\n")


def test_blank_edit_after_exhaustion_keeps_commit_excluded():
    editor = MagicMock(return_value="\n")
    controller, _, _ = make_controller(["e", "c"], editor=editor)

    assert controller.run("", MICRO, exhausted=True) is State.ABORTED
    controller.committer.assert_not_called()


def test_validate_choice():
    controller, _, _ = make_controller([], base_excluded={"c"})

    assert controller.validate_choice("e") == "e"
    with pytest.raises(InvalidChoice):
        controller.validate_choice("c")
    with pytest.raises(InvalidChoice):
        controller.validate_choice("z")
