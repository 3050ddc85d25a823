"""
E-mail sending via Google Cloud Pub/Sub.

The ``Mailer`` does not talk to an SMTP server. It puts an e-mail message
into a Pub/Sub topic which is subsequently picked up by a Cloud Function that
actually sends the message.

Architecture:
    ::

        mailer.new_email("Welcome", "jane@example.com")   -> Email
              .set_html("<p>Hi</p>")
              .set_trace_id(trace_id)
                    │
        mailer.send(email)
                    │  JSON body + {"environment", "traceID"} attributes
                    ▼
        Pub/Sub topic ──► mailman Cloud Function ──► e-mail provider

Message format:
    The JSON body uses the field names ``TraceID``, ``Domain``, ``Sender``,
    ``Recipients``, ``CC``, ``BCC``, ``ReplyTo``, ``Subject``, ``Plaintext``,
    ``HTML``, ``TemplateName`` and ``TemplateData``.

Examples:
    >>> mailer = Mailer.create("my-project", "emails", "example.com",
    ...                        "noreply@example.com", "production")
    >>> email = mailer.new_email("Welcome", "jane@example.com").set_text("Hi Jane")
    >>> message_id = mailer.send(email)

Tags:
    email, pubsub, google-cloud, dusted
"""

from __future__ import annotations

import concurrent.futures

from google.api_core import exceptions as google_exceptions
from google.cloud import pubsub_v1
from pydantic import BaseModel, ConfigDict, Field

from dusted.fault import SystemFault, system, system_wrap
from dusted.logging import get_logger
from dusted.settings import get_settings

logger = get_logger(__name__)

COMPONENT = "mailer"


class Email(BaseModel):
    """An e-mail message.

    Create instances with ``Mailer.new_email`` so that domain and sender are
    always set, then use the ``set_*`` methods to fill in the rest.
    """

    model_config = ConfigDict(populate_by_name=True)

    trace_id: str = Field(default="", alias="TraceID")
    domain: str = Field(alias="Domain")
    sender: str = Field(alias="Sender")
    recipients: list[str] = Field(default_factory=list, alias="Recipients")
    cc: list[str] = Field(default_factory=list, alias="CC")
    bcc: list[str] = Field(default_factory=list, alias="BCC")
    reply_to: str = Field(default="", alias="ReplyTo")
    subject: str = Field(default="", alias="Subject")
    plaintext: str = Field(default="", alias="Plaintext")
    html: str = Field(default="", alias="HTML")
    template_name: str = Field(default="", alias="TemplateName")
    template_data: dict[str, str] = Field(default_factory=dict, alias="TemplateData")

    def set_trace_id(self, trace_id: str) -> Email:
        self.trace_id = trace_id
        return self

    def set_cc(self, *cc: str) -> Email:
        self.cc = list(cc)
        return self

    def set_bcc(self, *bcc: str) -> Email:
        self.bcc = list(bcc)
        return self

    def set_reply_to(self, reply_to: str) -> Email:
        self.reply_to = reply_to
        return self

    def set_text(self, text: str) -> Email:
        self.plaintext = text
        return self

    def set_html(self, body: str) -> Email:
        self.html = body
        return self

    def set_template(self, template_name: str, template_data: dict[str, str]) -> Email:
        self.template_name = template_name
        self.template_data = dict(template_data)
        return self

    def to_binary(self) -> bytes:
        """Serialize the message body published to Pub/Sub."""
        try:
            return self.model_dump_json(by_alias=True).encode("utf-8")
        except ValueError as exc:
            raise system_wrap(exc, COMPONENT, "to_binary", "failed to encode email message") from exc

    def __str__(self) -> str:
        return f'email: {{ from: "{self.sender}", to: {self.recipients}, subject: "{self.subject}" }}'


class Mailer:
    """Publishes e-mails to a Pub/Sub topic."""

    def __init__(
        self,
        publisher: pubsub_v1.PublisherClient | None,
        topic: str,
        domain: str,
        sender: str,
        environment_name: str,
        *,
        publish_timeout: float | None = None,
    ):
        self._publisher = publisher
        self._topic = topic
        self._domain = domain
        self._sender = sender
        self._environment_name = environment_name
        self._publish_timeout = publish_timeout or get_settings().mailer_publish_timeout

    @classmethod
    def create(
        cls,
        project_id: str,
        topic_id: str,
        domain: str,
        sender: str,
        environment_name: str | None = None,
    ) -> Mailer:
        """Create a mailer with a new ``PublisherClient`` for the given topic."""
        publisher = pubsub_v1.PublisherClient()
        return cls(
            publisher,
            publisher.topic_path(project_id, topic_id),
            domain,
            sender,
            environment_name or get_settings().environment,
        )

    def new_email(self, subject: str, *recipients: str) -> Email:
        return Email(
            domain=self._domain,
            sender=self._sender,
            recipients=list(recipients),
            subject=subject,
        )

    def send(self, email: Email) -> str:
        """Publish an e-mail and wait for the message ID.

        Raises:
            SystemFault: The mailer is not configured, the message could not
                be serialized, or publishing failed or timed out.
        """
        if self._publisher is None or not self._topic or not self._domain or not self._sender:
            raise system(
                COMPONENT,
                "send",
                "cannot send email because the topic, domain or sender were not set",
            )

        try:
            data = email.to_binary()
        except SystemFault as exc:
            raise system_wrap(
                exc, COMPONENT, "send", "failed to serialize message to byte array"
            ) from exc

        attributes = {"environment": self._environment_name}
        if email.trace_id:
            attributes["traceID"] = email.trace_id

        try:
            future = self._publisher.publish(self._topic, data, **attributes)
            message_id = future.result(timeout=self._publish_timeout)
        except concurrent.futures.TimeoutError as exc:
            raise system(
                COMPONENT,
                "send",
                f"timed out after {self._publish_timeout}s before email status could get verified",
            ) from exc
        except google_exceptions.GoogleAPIError as exc:
            raise system_wrap(
                exc, COMPONENT, "send", "failed to publish message to PubSub topic"
            ) from exc

        logger.info("email_published", email=str(email), message_id=message_id)
        return message_id


__all__ = [
    "Email",
    "Mailer",
]
