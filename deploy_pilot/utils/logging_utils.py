# deploy_pilot/utils/logging_utils.py
"""Logging helpers"""

import logging
from typing import Iterable, List

MASK = "***"


class SecretMaskingFilter(logging.Filter):
    """Replaces credential values in log records with ``***``

    Attach it to a handler so records from every logger pass through it.
    """

    def __init__(self, secrets: Iterable[str] = ()):
        super().__init__()
        self._secrets: List[str] = []
        self.add_secrets(secrets)

    def add_secrets(self, secrets: Iterable[str]) -> None:
        for secret in secrets:
            if secret and secret not in self._secrets:
                self._secrets.append(secret)
        # Longest first so a value containing another is masked whole
        self._secrets.sort(key=len, reverse=True)

    def mask(self, text: str) -> str:
        for secret in self._secrets:
            text = text.replace(secret, MASK)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True
        message = record.getMessage()
        masked = self.mask(message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True
