# readaloud/client.py
from __future__ import annotations

import logging
from typing import Dict, Optional

import requests

from readaloud.config import API_BASE, UPLOAD_FIELD, UPLOAD_TIMEOUT
from readaloud.errors import NetworkError

logger = logging.getLogger(__name__)


class ExtractionClient:
    """Talks to the extraction service over HTTP."""

    def __init__(self, api_base: str = API_BASE, timeout: Optional[float] = UPLOAD_TIMEOUT):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout

    def upload(self, filename: str, data: bytes, content_type: str = "application/pdf") -> Dict:
        files = {UPLOAD_FIELD: (filename, data, content_type)}
        try:
            r = requests.post(f"{self.api_base}/upload", files=files, timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkError(str(e)) from e

        if not r.ok:
            logger.warning("Upload failed (%s): %s", r.status_code, r.text[:200])
            raise NetworkError("Error during file upload", status_code=r.status_code)

        try:
            return r.json()
        except ValueError as e:
            raise NetworkError("Response was not JSON", status_code=r.status_code) from e

    def health(self) -> Dict:
        try:
            r = requests.get(f"{self.api_base}/health", timeout=10)
            r.raise_for_status()
        except requests.RequestException as e:
            raise NetworkError(str(e)) from e
        return r.json()
