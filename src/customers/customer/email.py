"""EmailAddress value object for validated email addresses."""

import re

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from customers.domain import customers

_EMAIL_PATTERN = re.compile(r"^[^@\s;,()<>\[\]\\\"]+@[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?)+$")


@customers.value_object(part_of="Customer")
class EmailAddress:
    """A structurally valid email address, stored lower-cased."""

    address: String(required=True, max_length=254)

    @invariant.post
    def verify_email_address(self):
        email = self.address or ""
        local_part = email.split("@", 1)[0]
        if (
            not _EMAIL_PATTERN.match(email)
            or local_part.startswith(".")
            or local_part.endswith(".")
            or ".." in local_part
        ):
            raise ValidationError({"email": [f"Invalid email address: {email!r}"]})
