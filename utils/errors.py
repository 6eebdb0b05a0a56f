"""
Error types raised by the microblog services
"""


class MicroblogError(Exception):
    """Base class for errors raised by the services"""


class ValidationError(MicroblogError, ValueError):
    """Field-level validation failure, meant to be shown back to the user.

    ``errors`` maps a field name to the list of messages for that field,
    e.g. ``{'email': ['has already been taken']}``.
    """

    def __init__(self, errors):
        self.errors = {field: list(messages) for field, messages in errors.items()}
        super().__init__('; '.join(self.full_messages()))

    def full_messages(self):
        """Messages prefixed with the humanized field name"""
        messages = []
        for field, field_messages in self.errors.items():
            label = field.replace('_', ' ').capitalize()
            messages.extend(f"{label} {message}" for message in field_messages)
        return messages

    def __contains__(self, field):
        return field in self.errors


class InvalidOperation(MicroblogError):
    """Rejected request: self-follow, unknown user, missing privileges"""
