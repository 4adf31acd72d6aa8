import pytest

from paced_reader.presentation import DEFAULT_RULES, CommandRouter, CommandRule, Intent, ReaderMode

router = CommandRouter()


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Auto please", Intent.START_AUTO),
        ("play", Intent.START_AUTO),
        ("Start reading now", Intent.START_AUTO),
        ("Please GO FASTER", Intent.SPEED_UP),
        ("speed up", Intent.SPEED_UP),
        ("a bit slower", Intent.SLOW_DOWN),
        ("slow down", Intent.SLOW_DOWN),
        ("next", Intent.NEXT),
        ("continue", Intent.NEXT),
        ("continue reading", Intent.NEXT),
        ("go back", Intent.PREVIOUS),
        ("previous page", Intent.PREVIOUS),
        ("stop", Intent.STOP),
        ("pause for a second", Intent.STOP),
        ("transcribe", Intent.STOP),
        ("restart", Intent.RESTART),
        ("what a lovely day", Intent.NONE),
        ("cancel", Intent.NONE),
        ("start text", Intent.NONE),
    ],
)
def test_presenting_mode_rules(text, expected):
    assert router.classify(text, ReaderMode.PRESENTING) == expected


@pytest.mark.parametrize(
    "text,expected",
    [
        ("resume text", Intent.RESUME),
        ("continue text", Intent.RESUME),
        ("read text", Intent.RESUME),
        ("continue", Intent.RESUME),
        ("start", Intent.RESUME),
        ("restart", Intent.RESUME),
        ("next", Intent.NONE),
        ("stop", Intent.NONE),
        ("hello there", Intent.NONE),
    ],
)
def test_command_mode_rules(text, expected):
    assert router.classify(text, ReaderMode.COMMAND) == expected


@pytest.mark.parametrize(
    "text,expected",
    [
        ("cancel", Intent.LOOKUP_CANCEL),
        ("exit lookup", Intent.LOOKUP_CANCEL),
        ("continue reading", Intent.LOOKUP_CANCEL),
        ("resume reading", Intent.LOOKUP_CANCEL),
        ("serendipity", Intent.NONE),
        ("next", Intent.NONE),
    ],
)
def test_lookup_mode_rules(text, expected):
    assert router.classify(text, ReaderMode.LOOKUP) == expected


@pytest.mark.parametrize("mode", list(ReaderMode))
def test_lookup_trigger_wins_in_every_mode(mode):
    assert router.classify("Hey Reader, continue reading", mode) == Intent.ENTER_LOOKUP


def test_unscoped_classification_follows_table_order():
    assert router.classify("continue reading") == Intent.LOOKUP_CANCEL
    assert router.classify("continue") == Intent.NEXT
    assert router.classify("autoplay then stop") == Intent.START_AUTO
    assert router.classify("start text") == Intent.RESUME


def test_default_table_priority():
    assert [rule.intent for rule in DEFAULT_RULES] == [
        Intent.ENTER_LOOKUP,
        Intent.LOOKUP_CANCEL,
        Intent.START_AUTO,
        Intent.SPEED_UP,
        Intent.SLOW_DOWN,
        Intent.NEXT,
        Intent.PREVIOUS,
        Intent.STOP,
        Intent.RESTART,
        Intent.RESUME,
    ]


def test_custom_table_order_is_respected():
    rules = (
        CommandRule(Intent.STOP, ("next",)),
        CommandRule(Intent.NEXT, ("next",)),
    )
    assert CommandRouter(rules).classify("next") == Intent.STOP


def test_interim_command_has_no_intent():
    command = router.to_command("next", ReaderMode.PRESENTING, is_final=False)
    assert command.intent == Intent.NONE
    assert command.raw_text == "next"
    assert not command.is_final
