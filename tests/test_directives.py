"""Tests for merging realmlist and account directives into Config.wtf text."""

import pytest
from hypothesis import given, strategies as st

from realm_launcher.services import ValidationError
from realm_launcher.services.directives import (
    Directive,
    classify,
    merge_directives,
    split_lines,
)


hosts = st.text(
    min_size=1,
    max_size=40,
    alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Nd"), whitelist_characters=".-"),
)
accounts = st.one_of(
    st.none(),
    st.just(""),
    st.text(max_size=20).filter(lambda x: "\n" not in x and "\r" not in x),
)
# Lines that never look like a recognized directive
unrelated_lines = st.text(
    min_size=1,
    max_size=40,
    alphabet=st.characters(blacklist_categories=("Cs", "Zl", "Zp", "Cc")),
).filter(lambda line: classify(line) is None)
config_lines = st.one_of(
    unrelated_lines,
    st.sampled_from([
        "SET realmlist old.server.com",
        "set portal eu",
        '  SET accountName "someone"',
        "",
        "   ",
    ]),
)


@given(text=st.one_of(st.none(), st.text()), host=hosts, account=accounts)
def test_merge_is_idempotent(text: str | None, host: str, account: str | None) -> None:
    once = merge_directives(text, host, account)
    twice = merge_directives(once, host, account)

    assert twice == once


@given(lines=st.lists(config_lines, max_size=10), host=hosts, account=accounts)
def test_merge_preserves_unrelated_lines_in_order(
    lines: list[str], host: str, account: str | None
) -> None:
    text = "\r\n".join(lines)

    merged = merge_directives(text, host, account).split("\r\n")

    expected_unrelated = [line for line in lines if line and classify(line) is None]
    assert [line for line in merged if classify(line) is None] == expected_unrelated
    assert f"set realmlist {host}" in merged
    if account:
        assert f'SET accountName "{account}"' in merged
    else:
        assert not any(classify(line) is Directive.ACCOUNT_NAME for line in merged)


def test_merge_into_missing_file() -> None:
    merged = merge_directives(None, "logon.example.com", "hero")

    assert merged == 'set realmlist logon.example.com\r\nSET accountName "hero"'


def test_merge_into_missing_file_without_account() -> None:
    assert merge_directives(None, "logon.example.com", None) == "set realmlist logon.example.com"
    assert merge_directives("", "logon.example.com", "") == "set realmlist logon.example.com"


def test_merge_replaces_realmlist_in_place() -> None:
    text = 'SET REALMLIST old.server.com\r\nSET gxApi "d3d11"'

    merged = merge_directives(text, "new.server.com", None)

    assert merged == 'set realmlist new.server.com\r\nSET gxApi "d3d11"'


def test_merge_keeps_unrelated_lines() -> None:
    text = 'SET gxResolution "1920x1080"\nSET realmlist old\nSET gxWindow "1"\n'

    merged = merge_directives(text, "new.host", "hero")

    assert merged.split("\r\n") == [
        'SET gxResolution "1920x1080"',
        "set realmlist new.host",
        'SET gxWindow "1"',
        'SET accountName "hero"',
    ]


def test_portal_is_treated_as_realmlist() -> None:
    merged = merge_directives('SET portal "us"\r\nSET locale "enUS"', "new.host", None)

    assert merged == 'set realmlist new.host\r\nSET locale "enUS"'


def test_duplicate_directives_are_all_rewritten() -> None:
    text = "SET realmlist a\r\nSET gxApi x\r\nset realmlist b\r\nSET portal c"

    merged = merge_directives(text, "new.host", None)

    assert merged.split("\r\n") == [
        "set realmlist new.host",
        "SET gxApi x",
        "set realmlist new.host",
        "set realmlist new.host",
    ]


def test_existing_account_is_replaced() -> None:
    text = 'SET accountName "old"\r\nSET realmlist x'

    merged = merge_directives(text, "new.host", "hero")

    assert merged == 'SET accountName "hero"\r\nset realmlist new.host'


def test_existing_account_is_removed_without_account() -> None:
    text = 'SET accountName "old"\r\nSET realmlist x\r\nSET gxApi y'

    for account in (None, ""):
        merged = merge_directives(text, "new.host", account)
        assert merged == "set realmlist new.host\r\nSET gxApi y"


def test_empty_lines_are_dropped_and_output_uses_crlf() -> None:
    text = "SET a 1\n\n\nSET b 2\r\n\r\n"

    merged = merge_directives(text, "h", None)

    assert merged == "SET a 1\r\nSET b 2\r\nset realmlist h"
    assert "\n" not in merged.replace("\r\n", "")


def test_matching_is_case_insensitive_after_leading_whitespace() -> None:
    assert classify("   sEt ReAlMlIsT foo") is Directive.REALMLIST
    assert classify("\tset PORTAL eu") is Directive.REALMLIST
    assert classify("set accountname x") is Directive.ACCOUNT_NAME
    assert classify("SET realmlistName foo") is None
    assert classify("# SET realmlist foo") is None


def test_host_is_trimmed() -> None:
    assert merge_directives(None, "  logon.test \t", None) == "set realmlist logon.test"


@pytest.mark.parametrize("host", ["", "   ", "a\nb", "a\rb"])
def test_invalid_host_is_rejected(host: str) -> None:
    with pytest.raises(ValidationError):
        merge_directives(None, host, None)


def test_multiline_account_is_rejected() -> None:
    with pytest.raises(ValidationError):
        merge_directives(None, "h", "a\nb")


def test_split_lines_handles_mixed_endings() -> None:
    assert split_lines("a\r\nb\nc") == ["a", "b", "c"]
    assert split_lines("a\n") == ["a"]
    assert split_lines("") == []
    assert split_lines("a\rb\n") == ["a\rb"]
