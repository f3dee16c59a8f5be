"""Password strength rules shared by registration, password change and reset.

Django's configured validators run first; the academy's own composition
rules are then checked in order and the first failure is reported.
"""
from django.contrib.auth.password_validation import \
    validate_password as django_validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

MIN_PASSWORD_LENGTH = 8
SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{}|;:,.<>?/"

PASSWORD_RULES = [
    (lambda value: len(value) >= MIN_PASSWORD_LENGTH,
     f"Password must be at least {MIN_PASSWORD_LENGTH} characters."),
    (lambda value: any(char.isdigit() for char in value),
     "Password must contain at least one digit."),
    (lambda value: any(char.isalpha() for char in value),
     "Password must contain at least one letter."),
    (lambda value: any(char in SPECIAL_CHARACTERS for char in value),
     "Password must contain at least one special character."),
]


def validate_password_strength(value: str, user=None) -> str:
    """Return ``value`` or raise ``serializers.ValidationError``.

    ``user`` is passed through to Django's similarity validator.
    """
    try:
        django_validate_password(value, user=user)
    except DjangoValidationError as e:
        raise serializers.ValidationError(list(e.messages))

    for check, message in PASSWORD_RULES:
        if not check(value):
            raise serializers.ValidationError(message)

    return value
