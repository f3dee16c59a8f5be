"""Response utilities and DRF exception handler helpers.

This module provides a canonical API response envelope and a DRF
exception handler that normalizes errors into the same {success, message,
data} structure used across the API.

Keep implementations small and focused so they are easy to test and
document. These functions are imported widely by views and settings.
"""

import logging

from rest_framework import serializers, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class APIResponseSerializer(serializers.Serializer):
    """Schema of the envelope every endpoint returns (OpenAPI docs only)."""

    success = serializers.BooleanField()
    message = serializers.CharField()
    data = serializers.JSONField(default=dict)


def api_response(success: bool, message: str, data=None, status_code=status.HTTP_200_OK):
    """
    Reusable API response wrapper for consistent frontend consumption.
    Args:
        success (bool): Indicates if the request was successful.
        message (str): Human-readable message for the frontend.
        data (dict or list, optional): The data payload. Defaults to empty dict.
        status_code (int, optional): HTTP status code. Defaults to 200.
    Returns:
        Response: DRF Response object with standardized structure.
    """
    if data is None:
        data = {}
    return Response({"success": success, "message": message, "data": data}, status=status_code)


def extract_clean_message(error_data):
    """Recursively extract clean error message from nested errors."""
    if isinstance(error_data, list) and error_data:
        # Get first item from list
        return extract_clean_message(error_data[0])
    if isinstance(error_data, dict) and error_data:
        # Get first value from dictionary and recurse
        first_value = next(iter(error_data.values()))
        return extract_clean_message(first_value)
    return str(error_data)


def custom_exception_handler(exc, context):
    """
    Custom exception handler that formats all errors to match api_response format.
    """
    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        # Extract message from exception detail or response data
        if hasattr(exc, "detail"):
            message = extract_clean_message(exc.detail)
        else:
            message = extract_clean_message(response.data)

        status_code = response.status_code

        # For validation errors in login, use 401 instead of 400
        request = context.get("request")
        if isinstance(exc, serializers.ValidationError) and request is not None and "login" in str(request.path):
            status_code = status.HTTP_401_UNAUTHORIZED

        return api_response(False, message, response.data, status_code)

    logger.exception("Unhandled exception in %s", context.get("view").__class__.__name__, exc_info=exc)
    return api_response(
        False,
        f"An internal server error occurred: {str(exc)}",
        {},
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
