from gidgethub.sansio import Event
import pytest

from prettyplease.model import Config
from prettyplease.pipeline import Command, SkipReason, TriggerEvent
from prettyplease.pipeline.stages import check_event, is_edit_echo, parse_command

PHRASE = "prettier, please!"


def make_comment_event(
    body: str = "prettier, please!",
    action: str = "created",
    changes=None,
    event: str = "issue_comment",
):
    data = {
        "action": action,
        "comment": {"id": 9001, "body": body},
        "issue": {"number": 42},
        "repository": {"name": "repo", "owner": {"login": "org"}},
        "installation": {"id": 77},
    }
    if changes is not None:
        data["changes"] = changes
    return Event(data, event=event, delivery_id="delivery-1")


@pytest.mark.parametrize(
    "body",
    [
        "prettier, please!",
        "prettier, please!\n",
        "   prettier, please!  ",
        "\n\tprettier, please! and THEN SOME",
        "prettier, please!!!",
    ],
)
def test_parse_command_recognizes_trigger_prefix(body):
    assert parse_command(body, PHRASE) == Command.recognized


@pytest.mark.parametrize(
    "body",
    [
        "please format this",
        "Prettier, please!",
        "PRETTIER, PLEASE!",
        "prettier please!",
        "could you say prettier, please!",
        "",
        "   ",
    ],
)
def test_parse_command_rejects_other_bodies(body):
    assert parse_command(body, PHRASE) == Command.none


def test_parse_command_uses_configured_phrase():
    assert parse_command("/format now", "/format") == Command.recognized
    assert parse_command("prettier, please!", "/format") == Command.none


def test_trigger_event_from_created_comment():
    trigger = TriggerEvent.from_event(make_comment_event(body="prettier, please!\n"))

    assert trigger.event_name == "issue_comment"
    assert trigger.action == "created"
    assert trigger.body == "prettier, please!\n"
    assert not trigger.edited
    assert trigger.previous_body == trigger.body
    assert trigger.number == 42
    assert trigger.owner == "org"
    assert trigger.repo == "repo"
    assert trigger.installation_id == 77
    assert trigger.comment_id == 9001


def test_trigger_event_from_edited_comment_keeps_previous_body():
    trigger = TriggerEvent.from_event(
        make_comment_event(
            action="edited", changes={"body": {"from": "looks good to me"}}
        )
    )
    assert trigger.edited
    assert trigger.previous_body == "looks good to me"


def test_trigger_event_from_other_event_family():
    event = Event(
        {"action": "opened", "pull_request": {"number": 3}},
        event="pull_request",
        delivery_id="x",
    )
    trigger = TriggerEvent.from_event(event)
    assert trigger.event_name == "pull_request"
    assert trigger.body == ""
    assert trigger.number is None
    assert trigger.owner is None


def test_check_event_accepts_created_and_edited():
    assert check_event(TriggerEvent.from_event(make_comment_event())) is None
    assert (
        check_event(TriggerEvent.from_event(make_comment_event(action="edited")))
        is None
    )


def test_check_event_rejects_other_events_and_actions():
    assert (
        check_event(TriggerEvent.from_event(make_comment_event(event="push")))
        == SkipReason.unsupported_event
    )
    assert (
        check_event(TriggerEvent.from_event(make_comment_event(action="deleted")))
        == SkipReason.unsupported_action
    )


def test_edit_that_introduces_the_phrase_is_not_an_echo():
    config = Config()
    trigger = TriggerEvent.from_event(
        make_comment_event(action="edited", changes={"body": {"from": "typo"}})
    )
    assert not is_edit_echo(trigger, config)


def test_edit_of_a_comment_that_already_matched_is_an_echo():
    config = Config()
    trigger = TriggerEvent.from_event(
        make_comment_event(
            body="prettier, please! (again)",
            action="edited",
            changes={"body": {"from": "prettier, please!"}},
        )
    )
    assert is_edit_echo(trigger, config)

    # no body change recorded, the body was the same before
    trigger = TriggerEvent.from_event(make_comment_event(action="edited", changes={}))
    assert is_edit_echo(trigger, config)


def test_new_comment_is_never_an_echo():
    assert not is_edit_echo(TriggerEvent.from_event(make_comment_event()), Config())
