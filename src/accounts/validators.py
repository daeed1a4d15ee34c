"""Password validators plugged into ``AUTH_PASSWORD_VALIDATORS``."""
import re

from django.core.exceptions import ValidationError


class MixedCharacterClassesValidator:
    """Require at least one uppercase letter, one lowercase letter and one digit."""

    message = "Password must contain uppercase, lowercase, and numbers"

    def validate(self, password, user=None):
        if not (
            re.search(r"[A-Z]", password)
            and re.search(r"[a-z]", password)
            and re.search(r"\d", password)
        ):
            raise ValidationError(self.message, code="password_character_classes")

    def get_help_text(self):
        return "Your password must contain uppercase, lowercase, and numbers."
