"""
Receipt Verification
Sends a photographed receipt to the recognition service and classifies the result.
"""

import json
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import requests

from ..config import get_settings
from .models import ReceiptInfo

logger = logging.getLogger(__name__)

SUCCESS_STATUS = "SUCCESS"


class RecognitionError(Exception):
    """The recognition service could not be reached or answered garbage."""


class RecognitionTimeout(RecognitionError):
    """The recognition service did not answer in time."""


@dataclass(frozen=True)
class RecognitionResponse:
    """Structured answer from the recognition service."""

    status: str
    store_name: Optional[str] = None
    store_address: Optional[str] = None


class ReceiptRecognizer(Protocol):
    """Anything that can read store name and address off a receipt image."""

    def recognize(self, image: bytes) -> RecognitionResponse:
        ...


@dataclass(frozen=True)
class ReceiptResult:
    """
    Outcome of receipt verification.

    Either a success carrying the receipt's store identity, or a failure
    carrying a reason code. Build with ReceiptResult.success / ReceiptResult.failure.
    """

    ok: bool
    info: Optional[ReceiptInfo] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, store_name: str, store_address: str) -> "ReceiptResult":
        return cls(ok=True, info=ReceiptInfo(store_name=store_name, store_address=store_address))

    @classmethod
    def failure(cls, reason: str) -> "ReceiptResult":
        return cls(ok=False, reason=reason)


def _clean(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


class ReceiptVerifier:
    """
    Verifies receipt images through an injected recognizer.

    Only an explicit SUCCESS status with both store fields present counts as
    verified; everything else, including timeouts, is a failure.
    """

    def __init__(self, recognizer: ReceiptRecognizer):
        self.recognizer = recognizer

    def verify(self, image: bytes) -> ReceiptResult:
        """
        Verify a receipt image.

        Args:
            image: Raw image bytes

        Returns:
            ReceiptResult success or failure
        """
        if not image:
            return ReceiptResult.failure("empty_image")

        try:
            response = self.recognizer.recognize(image)
        except RecognitionTimeout as e:
            logger.warning(f"Receipt recognition timed out: {e}")
            return ReceiptResult.failure("timeout")
        except RecognitionError as e:
            logger.warning(f"Receipt recognition failed: {e}")
            return ReceiptResult.failure("recognition_error")

        if response.status != SUCCESS_STATUS:
            logger.info(f"Receipt rejected by recognizer: status={response.status}")
            return ReceiptResult.failure(f"status:{response.status}")

        store_name = _clean(response.store_name)
        store_address = _clean(response.store_address)
        if not store_name or not store_address:
            logger.info("Receipt recognized but store name or address is missing")
            return ReceiptResult.failure("missing_fields")

        logger.debug(f"Receipt verified: store={store_name!r}, address={store_address!r}")
        return ReceiptResult.success(store_name, store_address)


class ClovaReceiptClient:
    """
    Receipt recognizer backed by the CLOVA OCR receipt API.

    Sends the image as a multipart upload and reads the store name and first
    address from the specialized receipt result.
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        secret: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            api_url: Invoke URL of the OCR domain (defaults to settings.ocr_api_url)
            secret: X-OCR-SECRET value (defaults to settings.ocr_secret)
            timeout: Request timeout in seconds (defaults to settings.ocr_timeout_seconds)
            session: requests session to reuse connections
        """
        settings = get_settings()
        self.api_url = api_url if api_url is not None else settings.ocr_api_url
        self.secret = secret if secret is not None else settings.ocr_secret
        self.timeout = timeout if timeout is not None else settings.ocr_timeout_seconds
        self.session = session or requests.Session()

    def recognize(self, image: bytes, image_format: str = "jpg") -> RecognitionResponse:
        if not self.api_url:
            raise RecognitionError("OCR API URL is not configured")

        message = {
            "version": "V2",
            "requestId": str(uuid.uuid4()),
            "timestamp": int(time.time() * 1000),
            "images": [{"format": image_format, "name": "receipt"}],
        }

        try:
            response = self.session.post(
                self.api_url,
                headers={"X-OCR-SECRET": self.secret},
                data={"message": json.dumps(message)},
                files={"file": (f"receipt.{image_format}", image)},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.Timeout as e:
            raise RecognitionTimeout(f"OCR request exceeded {self.timeout}s") from e
        except requests.RequestException as e:
            raise RecognitionError(f"OCR request failed: {e}") from e
        except ValueError as e:
            raise RecognitionError(f"OCR response is not JSON: {e}") from e

        return parse_clova_response(payload)


def _as_dict(value: Any) -> Dict[str, Any]:
    """Missing or null sections of a response read as empty."""
    return value if isinstance(value, dict) else {}


def _field_text(field: Optional[Dict[str, Any]]) -> Optional[str]:
    """Prefer the formatted value of a receipt field, fall back to the raw text."""
    if not isinstance(field, dict):
        return None
    formatted = field.get("formatted")
    if isinstance(formatted, dict) and isinstance(formatted.get("value"), str) and formatted["value"]:
        return formatted["value"]
    text = field.get("text")
    return text if isinstance(text, str) else None


def parse_clova_response(payload: Dict[str, Any]) -> RecognitionResponse:
    """
    Pull status, store name and store address out of a CLOVA receipt response.

    Raises:
        RecognitionError: If the payload does not have the expected shape
    """
    try:
        image = payload["images"][0]
        status = image["inferResult"]
    except (KeyError, IndexError, TypeError) as e:
        raise RecognitionError(f"Unexpected OCR response shape: {e}") from e

    if status != SUCCESS_STATUS:
        return RecognitionResponse(status=status)

    receipt = _as_dict(image.get("receipt"))
    store_info = _as_dict(_as_dict(receipt.get("result")).get("storeInfo"))
    addresses = store_info.get("addresses")
    if not isinstance(addresses, list):
        addresses = []

    return RecognitionResponse(
        status=status,
        store_name=_field_text(store_info.get("name")),
        store_address=_field_text(addresses[0]) if addresses else None,
    )
