"""Account sign-up form with an advisory email uniqueness check."""

import logging
import re

from geocontacts.application.debounce import LookupController, LookupKind
from geocontacts.application.dto import (
    RegistrationFailed,
    RegistrationSucceeded,
    UniqueKind,
)
from geocontacts.application.errors import GeoContactsError
from geocontacts.application.lookup_gateway import LookupGateway
from geocontacts.application.messages import get_messages, message
from geocontacts.application.ports import AccountStore

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6


class RegistrationForm:
    def __init__(
        self,
        accounts: AccountStore,
        gateway: LookupGateway,
        lookups: LookupController,
        *,
        messages: dict | None = None,
    ) -> None:
        self._accounts = accounts
        self._gateway = gateway
        self._lookups = lookups
        self._messages = messages if messages is not None else get_messages()
        self.name = ""
        self.email = ""
        self.password = ""
        self.confirm_password = ""
        self.email_error: str | None = None
        self.form_error: str | None = None
        self._email_taken = False

    @property
    def checking_email(self) -> bool:
        return self._lookups.is_busy(LookupKind.EMAIL_UNIQUE)

    def set_email(self, value: str) -> None:
        self.email = (value or "").strip()
        self.email_error = None
        self._email_taken = False
        self._lookups.cancel(LookupKind.EMAIL_UNIQUE)

    def _email_format_error(self) -> str | None:
        if not self.email:
            return message(self._messages, "email.required")
        if not EMAIL_PATTERN.match(self.email):
            return message(self._messages, "email.invalid")
        return None

    def blur_email(self) -> bool:
        """Check format, then ask the server whether the email is taken."""
        self.email_error = self._email_format_error()
        if self.email_error:
            return False
        email = self.email
        self._lookups.schedule(
            LookupKind.EMAIL_UNIQUE,
            lambda: self._gateway.check_unique(UniqueKind.EMAIL, email),
            self._apply_email_check,
            on_error=self._email_check_failed,
            debounce=False,
        )
        return True

    def _apply_email_check(self, exists: bool) -> None:
        if exists:
            self._email_taken = True
            self.email_error = message(self._messages, "email.taken")

    def _email_check_failed(self, exc: Exception) -> None:
        logger.warning("Email check failed: %s", exc)

    async def submit(self) -> RegistrationSucceeded | RegistrationFailed:
        self.form_error = None
        format_error = self._email_format_error()
        if format_error:
            self.email_error = format_error
            return self._fail(format_error)
        if self._email_taken or self.email_error or self.checking_email:
            return self._fail(message(self._messages, "form.fix_errors"))
        if self.password != self.confirm_password:
            return self._fail(message(self._messages, "password.mismatch"))
        if len(self.password) < MIN_PASSWORD_LENGTH:
            return self._fail(message(self._messages, "password.too_short"))
        try:
            await self._accounts.register(self.name.strip(), self.email, self.password)
        except GeoContactsError as exc:
            logger.warning("Registration failed: %s", exc)
            reason = exc.message or message(self._messages, "form.register_failed")
            if "email" in reason.lower():
                reason = message(self._messages, "email.taken")
            return self._fail(reason)
        return RegistrationSucceeded(email=self.email)

    def _fail(self, reason: str) -> RegistrationFailed:
        self.form_error = reason
        return RegistrationFailed(reason=reason)
