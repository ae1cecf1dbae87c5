"""Request and response DTOs."""

from fulfillment.application.dto import requests, responses

__all__ = ["requests", "responses"]
