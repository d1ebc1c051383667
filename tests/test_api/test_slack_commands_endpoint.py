"""Tests for the slash command endpoint."""

import pytest

from jira_relay.models.slack_request import DeliveryTarget
from jira_relay.services.dispatcher import DECLINE_TEXT
from tests.utils.helpers import OTHER_CHANNEL, TEST_SECRET, form_body, invoke_handler, signed_headers

COMMANDS_PATH = "/slack/commands"


def post_command(dispatcher, fields, headers=None):
    body = form_body(fields)
    if headers is None:
        headers = signed_headers(
            TEST_SECRET, body, **{"Content-Type": "application/x-www-form-urlencoded"}
        )
    return invoke_handler(dispatcher, "POST", COMMANDS_PATH, body=body, headers=headers)


@pytest.mark.unit
def test_slash_command_acknowledged_then_answered(dispatcher, mock_jira_client, mock_responder, sample_slash_command):
    response = post_command(dispatcher, sample_slash_command)

    assert response.status == 200
    assert response.body == b""
    mock_jira_client.search.assert_awaited_once()
    target, text = mock_responder.deliver.await_args.args
    assert target == DeliveryTarget.callback(sample_slash_command["response_url"])
    assert "Total: *0*" in text


@pytest.mark.unit
def test_slash_help_command(dispatcher, mock_jira_client, mock_responder, sample_slash_command):
    response = post_command(dispatcher, dict(sample_slash_command, command="/comandos"))

    assert response.status == 200
    target, text = mock_responder.deliver.await_args.args
    assert text == dispatcher.registry.help_text()
    mock_jira_client.search.assert_not_awaited()


@pytest.mark.unit
def test_slash_command_declined_outside_allow_list(dispatcher, mock_jira_client, mock_responder, sample_slash_command):
    """The decline notice comes back in the HTTP response itself."""
    response = post_command(dispatcher, dict(sample_slash_command, channel_id=OTHER_CHANNEL))

    assert response.status == 200
    assert response.json() == {"response_type": "ephemeral", "text": DECLINE_TEXT}
    mock_jira_client.search.assert_not_awaited()
    mock_responder.deliver.assert_not_awaited()


@pytest.mark.unit
def test_slash_command_invalid_signature(dispatcher, mock_responder, sample_slash_command):
    response = post_command(dispatcher, sample_slash_command, headers={"X-Slack-Signature": "v0=bad"})

    assert response.status == 401
    mock_responder.deliver.assert_not_awaited()


@pytest.mark.unit
def test_slash_command_missing_response_url(dispatcher, mock_responder, sample_slash_command):
    fields = dict(sample_slash_command)
    del fields["response_url"]

    response = post_command(dispatcher, fields)

    assert response.status == 400
    mock_responder.deliver.assert_not_awaited()


@pytest.mark.unit
def test_slash_command_non_numeric_content_length(dispatcher, mock_responder, sample_slash_command):
    body = form_body(sample_slash_command)
    headers = signed_headers(TEST_SECRET, body, **{"Content-Length": "-x-"})

    response = post_command(dispatcher, sample_slash_command, headers=headers)

    assert response.status == 400
    mock_responder.deliver.assert_not_awaited()
