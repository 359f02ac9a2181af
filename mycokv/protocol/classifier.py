"""
Server Error Classification

Error lines from the server start with a three character code (E01-E15)
followed by free-text detail, e.g. "E09 Key not found: foo".
"""

from ..errors import ServerError

ERROR_CODES = {
    "E01": "Unknown command",
    "E02": "Missing key",
    "E03": "Invalid key",
    "E04": "Missing value",
    "E05": "Invalid value",
    "E06": "Log write failure",
    "E07": "Log read failure",
    "E08": "Log load failure",
    "E09": "Key not found",
    "E10": "Restore error",
    "E11": "Operation failure",
    "E12": "Internal error",
    "E13": "Serialization failure",
    "E14": "Missing command",
    "E15": "Invalid expiration",
}

KEY_NOT_FOUND = "E09"


class ErrorClassifier:
    """Recognizes error response lines and turns them into ServerError."""

    def has_error(self, raw: str) -> bool:
        """Check if a response line starts with a known error code."""
        return raw[:3] in ERROR_CODES

    def classify(self, raw: str) -> ServerError:
        """
        Build the ServerError for an error response line.

        Args:
            raw: The response line (trailing newline is dropped)

        Returns:
            ServerError carrying the code, its description and the raw line.

        Raises:
            ValueError: If the line does not start with a known error code
        """
        code = raw[:3]
        if code not in ERROR_CODES:
            raise ValueError(f"Not a MycoKV error response: {raw!r}")
        return ServerError(code, ERROR_CODES[code], raw.rstrip("\r\n"))
