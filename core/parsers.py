"""JSON parser that reports the position of malformed input."""

import json

from rest_framework.exceptions import ParseError
from rest_framework.parsers import JSONParser


class StrictJSONParser(JSONParser):
    """Rejects malformed bodies with the line and column of the first error."""

    def parse(self, stream, media_type=None, parser_context=None):
        try:
            return super().parse(stream, media_type, parser_context)
        except ParseError as exc:
            cause = exc.__cause__ or exc.__context__
            if isinstance(cause, json.JSONDecodeError):
                raise ParseError(
                    f"Invalid JSON format: {cause.msg} (line {cause.lineno}, column {cause.colno})"
                ) from cause
            raise
