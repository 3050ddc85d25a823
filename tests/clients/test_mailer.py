"""Tests for dusted.clients.mailer module."""

import concurrent.futures
import json
from unittest.mock import MagicMock

import pytest
from google.api_core import exceptions as google_exceptions

from dusted.clients.mailer import Email, Mailer
from dusted.fault import SystemFault


TOPIC = "projects/p/topics/emails"


@pytest.fixture
def publisher():
    publisher = MagicMock()
    publisher.publish.return_value.result.return_value = "msg-1"
    return publisher


@pytest.fixture
def mailer(publisher):
    return Mailer(publisher, TOPIC, "example.com", "noreply@example.com", "staging")


class TestEmail:
    def test_new_email_sets_domain_and_sender(self, mailer):
        email = mailer.new_email("Welcome", "jane@example.com", "john@example.com")
        assert email.domain == "example.com"
        assert email.sender == "noreply@example.com"
        assert email.subject == "Welcome"
        assert email.recipients == ["jane@example.com", "john@example.com"]

    def test_setters_chain(self, mailer):
        email = (
            mailer.new_email("Welcome", "jane@example.com")
            .set_trace_id("trace-1")
            .set_cc("cc@example.com")
            .set_bcc("bcc1@example.com", "bcc2@example.com")
            .set_reply_to("support@example.com")
            .set_text("Hi Jane")
            .set_html("<p>Hi Jane</p>")
            .set_template("welcome", {"name": "Jane"})
        )
        assert email.trace_id == "trace-1"
        assert email.cc == ["cc@example.com"]
        assert email.bcc == ["bcc1@example.com", "bcc2@example.com"]
        assert email.reply_to == "support@example.com"
        assert email.plaintext == "Hi Jane"
        assert email.html == "<p>Hi Jane</p>"
        assert email.template_name == "welcome"
        assert email.template_data == {"name": "Jane"}

    def test_to_binary_uses_wire_field_names(self, mailer):
        email = mailer.new_email("Welcome", "jane@example.com").set_text("Hi")
        body = json.loads(email.to_binary())
        assert body["Domain"] == "example.com"
        assert body["Sender"] == "noreply@example.com"
        assert body["Recipients"] == ["jane@example.com"]
        assert body["Subject"] == "Welcome"
        assert body["Plaintext"] == "Hi"
        assert set(body) == {
            "TraceID", "Domain", "Sender", "Recipients", "CC", "BCC",
            "ReplyTo", "Subject", "Plaintext", "HTML", "TemplateName", "TemplateData",
        }

    def test_parse_from_wire_names(self):
        email = Email.model_validate_json(
            '{"Domain": "example.com", "Sender": "a@example.com", "Subject": "Hi"}'
        )
        assert email.sender == "a@example.com"
        assert email.recipients == []

    def test_str(self, mailer):
        email = mailer.new_email("Welcome", "jane@example.com")
        text = str(email)
        assert "noreply@example.com" in text
        assert "Welcome" in text


class TestSend:
    def test_publishes_body_and_attributes(self, mailer, publisher):
        email = mailer.new_email("Welcome", "jane@example.com").set_trace_id("trace-1")

        assert mailer.send(email) == "msg-1"

        publisher.publish.assert_called_once_with(
            TOPIC, email.to_binary(), environment="staging", traceID="trace-1"
        )

    def test_trace_id_attribute_omitted_when_empty(self, mailer, publisher):
        mailer.send(mailer.new_email("Welcome", "jane@example.com"))
        _, kwargs = publisher.publish.call_args
        assert kwargs == {"environment": "staging"}

    def test_waits_with_publish_timeout(self, publisher):
        mailer = Mailer(publisher, TOPIC, "example.com", "a@example.com", "dev", publish_timeout=5.0)
        mailer.send(mailer.new_email("s", "b@example.com"))
        publisher.publish.return_value.result.assert_called_once_with(timeout=5.0)

    def test_default_timeout_from_settings(self, publisher, monkeypatch):
        monkeypatch.setenv("DUSTED_MAILER_PUBLISH_TIMEOUT", "12.5")
        mailer = Mailer(publisher, TOPIC, "example.com", "a@example.com", "dev")
        mailer.send(mailer.new_email("s", "b@example.com"))
        publisher.publish.return_value.result.assert_called_once_with(timeout=12.5)

    @pytest.mark.parametrize(
        "topic, domain, sender",
        [
            ("", "example.com", "a@example.com"),
            (TOPIC, "", "a@example.com"),
            (TOPIC, "example.com", ""),
        ],
    )
    def test_unconfigured_mailer(self, publisher, topic, domain, sender):
        mailer = Mailer(publisher, topic, domain, sender, "dev")
        email = Email(domain="example.com", sender="a@example.com", subject="s")
        with pytest.raises(SystemFault) as exc_info:
            mailer.send(email)
        assert exc_info.value.error() == (
            "mailer.send: cannot send email because the topic, domain or sender were not set"
        )
        publisher.publish.assert_not_called()

    def test_missing_publisher(self):
        mailer = Mailer(None, TOPIC, "example.com", "a@example.com", "dev")
        with pytest.raises(SystemFault):
            mailer.send(mailer.new_email("s", "b@example.com"))

    def test_timeout(self, mailer, publisher):
        publisher.publish.return_value.result.side_effect = concurrent.futures.TimeoutError()
        with pytest.raises(SystemFault) as exc_info:
            mailer.send(mailer.new_email("s", "b@example.com"))
        assert exc_info.value.message.startswith("mailer.send: timed out after ")
        assert exc_info.value.message.endswith("before email status could get verified")

    def test_publish_error(self, mailer, publisher):
        publisher.publish.return_value.result.side_effect = (
            google_exceptions.InternalServerError("backend unavailable")
        )
        with pytest.raises(SystemFault) as exc_info:
            mailer.send(mailer.new_email("s", "b@example.com"))
        fault = exc_info.value
        assert fault.message == "mailer.send: failed to publish message to PubSub topic"
        assert isinstance(fault.cause(), google_exceptions.InternalServerError)
        assert "backend unavailable" in fault.error()
