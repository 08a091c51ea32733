from tmichat.irc.commands import NOOP_COMMANDS, Command


def test_from_token_recognizes_known_commands():
    assert Command.from_token("PRIVMSG") is Command.PRIVMSG
    assert Command.from_token("001") is Command.WELCOME
    assert Command.from_token("globaluserstate") is Command.GLOBALUSERSTATE


def test_from_token_is_total():
    assert Command.from_token("NOTICE") is Command.OTHER
    assert Command.from_token("999") is Command.OTHER
    assert Command.from_token("*") is Command.OTHER


def test_noop_set():
    expected = {"CAP", "002", "003", "004", "353", "366", "372", "375", "376"}
    assert {c.value for c in NOOP_COMMANDS} == expected
    assert Command.from_token("366").is_noop
    assert not Command.from_token("001").is_noop
