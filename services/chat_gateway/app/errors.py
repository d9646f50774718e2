from typing import Any, Dict

PROMPT_REQUIRED = "Prompt is required"


class GatewayError(Exception):
    """Base error carrying the HTTP status it surfaces as."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message}


class InvalidInputError(GatewayError):
    status_code = 400

    def __init__(self, message: str = PROMPT_REQUIRED):
        super().__init__(message)


class CatalogFetchError(GatewayError):
    """Catalog endpoint unreachable or unusable. Recovered inside the catalog provider, never surfaced."""

