"""Notification domain value objects.

Immutable, validated values used by the notification aggregates: contact
addresses, the channel-bound recipient and the data bag used to render
templates.
"""

import re
from collections.abc import Iterator, Mapping
from typing import Any

import httpx
import phonenumbers

from notification_service.core.domain.base import ValueObject
from notification_service.core.errors import ValidationError
from notification_service.modules.notification.domain.enums import NotificationChannel
from notification_service.modules.notification.domain.errors import (
    EmptyValueError,
    InvalidFormatError,
    MissingPlaceholderError,
    UnknownChannelError,
    UnsupportedSchemeError,
)

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
E164_PATTERN = re.compile(r"^\+[1-9]\d{6,14}$")
PHONE_SEPARATORS = re.compile(r"[\s\-()]")
WEBHOOK_SCHEMES = frozenset({"http", "https"})
DEFAULT_PORTS = {"http": 80, "https": 443}


class EmailAddress(ValueObject):
    """Email address, trimmed and lowercased."""

    def __init__(self, value: str):
        super().__init__()

        if value is None or not str(value).strip():
            raise EmptyValueError("email")

        normalized = value.strip().lower()

        if not EMAIL_PATTERN.match(normalized):
            raise InvalidFormatError(value, "email", field="email")

        self.value = normalized
        self._freeze()

    @property
    def local_part(self) -> str:
        return self.value.split("@", 1)[0]

    @property
    def domain(self) -> str:
        return self.value.split("@", 1)[1]

    def __str__(self) -> str:
        return self.value


class PhoneNumber(ValueObject):
    """
    Phone number in E.164 format.

    Spaces, dashes and parentheses are stripped before validation, so
    ``"+39 123 456-7890"`` is stored as ``"+391234567890"``.
    """

    def __init__(self, value: str):
        super().__init__()

        if value is None or not str(value).strip():
            raise EmptyValueError("phone_number")

        normalized = PHONE_SEPARATORS.sub("", value)

        if not E164_PATTERN.match(normalized):
            raise InvalidFormatError(
                value, "E.164 phone number (+391234567890)", field="phone_number"
            )

        self.value = normalized
        self._freeze()

    @property
    def country_code(self) -> str | None:
        """
        International calling code, resolved against assigned calling codes.

        Calling codes are one to three digits long and prefix-free, so the
        first assigned prefix is the answer. None for an unassigned prefix.
        """
        digits = self.value[1:]
        for length in range(1, 4):
            candidate = int(digits[:length])
            if candidate in phonenumbers.COUNTRY_CODE_TO_REGION_CODE:
                return str(candidate)
        return None

    @property
    def national_number(self) -> str | None:
        """Digits following the calling code."""
        code = self.country_code
        if code is None:
            return None
        return self.value[1 + len(code) :]

    def __str__(self) -> str:
        return self.value


_RECIPIENT_FACTORY_KEY = object()


class Recipient(ValueObject):
    """
    Notification recipient bound to a delivery channel.

    Built only through the channel factories, which validate and normalize
    the value for the channel:

        Recipient.for_email("User@Example.com")   # value "user@example.com"
        Recipient.for_sms("+39 123 456 7890")     # value "+391234567890"
        Recipient.create("https://hooks.example.com/n", NotificationChannel.WEBHOOK)
    """

    def __init__(self, value: str, channel: NotificationChannel, _key: object = None):
        if _key is not _RECIPIENT_FACTORY_KEY:
            raise TypeError(
                "Recipient cannot be constructed directly; use a Recipient.for_* factory"
            )
        super().__init__()
        self.value = value
        self.channel = channel
        self._freeze()

    @classmethod
    def _build(cls, value: str, channel: NotificationChannel) -> "Recipient":
        return cls(value, channel, _key=_RECIPIENT_FACTORY_KEY)

    @classmethod
    def for_email(cls, email: str) -> "Recipient":
        """
        Create an email recipient.

        Raises:
            EmptyValueError: If the address is blank
            InvalidFormatError: If the address is malformed
        """
        return cls._build(EmailAddress(email).value, NotificationChannel.EMAIL)

    @classmethod
    def for_sms(cls, phone_number: str) -> "Recipient":
        """
        Create an SMS recipient with an E.164-normalized number.

        Raises:
            EmptyValueError: If the number is blank
            InvalidFormatError: If the number is not E.164
        """
        return cls._build(PhoneNumber(phone_number).value, NotificationChannel.SMS)

    @classmethod
    def for_push(cls, device_token: str) -> "Recipient":
        """
        Create a push recipient from an opaque device token.

        Raises:
            EmptyValueError: If the token is blank
        """
        if device_token is None or not str(device_token).strip():
            raise EmptyValueError("device_token")
        return cls._build(device_token.strip(), NotificationChannel.PUSH)

    @classmethod
    def for_webhook(cls, webhook_url: str) -> "Recipient":
        """
        Create a webhook recipient from an absolute http(s) URL.

        The stored URL has a lowercase scheme and host and no default port,
        so it parses back to itself.

        Raises:
            EmptyValueError: If the URL is blank
            InvalidFormatError: If the URL is not absolute
            UnsupportedSchemeError: If the scheme is not http or https
        """
        if webhook_url is None or not str(webhook_url).strip():
            raise EmptyValueError("webhook_url")

        raw = webhook_url.strip()
        try:
            url = httpx.URL(raw)
        except httpx.InvalidURL as e:
            raise InvalidFormatError(raw, "webhook URL", field="webhook_url") from e

        if not url.scheme:
            raise InvalidFormatError(raw, "webhook URL", field="webhook_url")

        if url.scheme not in WEBHOOK_SCHEMES:
            raise UnsupportedSchemeError(url.scheme)

        if not url.host:
            raise InvalidFormatError(raw, "webhook URL", field="webhook_url")

        if url.port == DEFAULT_PORTS[url.scheme]:
            url = url.copy_with(port=None)

        return cls._build(str(url), NotificationChannel.WEBHOOK)

    @classmethod
    def create(cls, value: str, channel: NotificationChannel | str) -> "Recipient":
        """
        Create a recipient for any channel.

        Raises:
            UnknownChannelError: If the channel is not recognized
            ValidationError: If the value is invalid for the channel
        """
        factories = {
            NotificationChannel.EMAIL: cls.for_email,
            NotificationChannel.SMS: cls.for_sms,
            NotificationChannel.PUSH: cls.for_push,
            NotificationChannel.WEBHOOK: cls.for_webhook,
        }
        factory = factories.get(_coerce_channel(channel))
        if factory is None:
            raise UnknownChannelError(channel)
        return factory(value)

    @classmethod
    def from_persisted_state(
        cls, value: str, channel: NotificationChannel | str
    ) -> "Recipient":
        """Rebuild a stored recipient without re-validating it."""
        return cls._build(value, _coerce_channel(channel))

    def __str__(self) -> str:
        return f"{self.channel.value}:{self.value}"


def _coerce_channel(channel: NotificationChannel | str) -> NotificationChannel:
    if isinstance(channel, NotificationChannel):
        return channel
    try:
        return NotificationChannel(channel)
    except ValueError as e:
        raise UnknownChannelError(channel) from e


class TemplateData(ValueObject):
    """
    Placeholder values used to render a template.

    Holds a defensive copy of the caller's mapping; values are stored as
    strings. Equality ignores insertion order.
    """

    def __init__(self, values: Mapping[str, Any]):
        super().__init__()

        if values is None:
            raise ValidationError("Template data cannot be None", field="values")

        copied: dict[str, str] = {}
        for key, value in values.items():
            if not isinstance(key, str):
                raise ValidationError(
                    f"Placeholder names must be strings, got {type(key).__name__}",
                    field="values",
                )
            if value is None:
                raise ValidationError(
                    f"Placeholder '{key}' has no value", field="values"
                )
            copied[key] = str(value)

        self._values = copied
        self._freeze()

    @classmethod
    def empty(cls) -> "TemplateData":
        return cls({})

    def get_value(self, key: str) -> str:
        """
        Get the value for a placeholder.

        Raises:
            MissingPlaceholderError: If the placeholder has no value
        """
        try:
            return self._values[key]
        except KeyError:
            raise MissingPlaceholderError(key) from None

    def has_value(self, key: str) -> bool:
        return key in self._values

    @property
    def keys(self) -> frozenset[str]:
        return frozenset(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def _equality_components(self) -> tuple:
        return (frozenset(self._values.items()),)

    def to_dict(self) -> dict[str, str]:
        return dict(self._values)

    def __repr__(self) -> str:
        return f"TemplateData({self._values!r})"

    def __str__(self) -> str:
        return ", ".join(f"{key}={value}" for key, value in self._values.items())


__all__ = [
    "EmailAddress",
    "PhoneNumber",
    "Recipient",
    "TemplateData",
]
