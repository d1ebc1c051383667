"""Tests for command token parsing."""

import pytest

from jira_relay.services.command_parser import parse_message_command, parse_slash_command


@pytest.mark.parametrize("text,expected", [
    ("please check #problemashoy now", "problemashoy"),
    ("#problemashoy", "problemashoy"),
    ("#ProblemasHoy", "problemashoy"),
    ("hola\n#comandos", "comandos"),
    ("#problemas_hoy2 y luego #comandos", "problemas_hoy2"),
    ("ver #problemashoy, gracias", "problemashoy"),
])
def test_parse_message_command(text, expected):
    assert parse_message_command(text) == expected


@pytest.mark.parametrize("text", [
    "see issue#123",
    "https://example.com/page#section",
    "no command here",
    "# spaced",
    "",
    None,
])
def test_parse_message_command_no_command(text):
    assert parse_message_command(text) is None


@pytest.mark.parametrize("command,expected", [
    ("/comandos", "comandos"),
    ("/ProblemasHoy", "problemashoy"),
    ("  /problemashoy ", "problemashoy"),
    ("problemashoy", "problemashoy"),
])
def test_parse_slash_command(command, expected):
    assert parse_slash_command(command) == expected


@pytest.mark.parametrize("command", ["", "/", None])
def test_parse_slash_command_empty(command):
    assert parse_slash_command(command) is None
