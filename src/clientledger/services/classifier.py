"""Fire-and-forget trigger for the external classification service."""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

import requests

from clientledger.domain.entities import ClassificationRequest

logger = logging.getLogger(__name__)


class ClassifierNotifier:
    """Posts classification requests on a background thread.

    The outcome is only logged: there is no retry and callers never wait.
    """

    def __init__(
        self,
        url: Optional[str],
        timeout: float = 30.0,
        max_workers: int = 2,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.timeout = timeout
        self._session = session or requests.Session()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="classifier")

    def notify(self, request: ClassificationRequest) -> Optional[Future]:
        """Schedule the trigger and return immediately."""
        if not self.url:
            logger.warning(
                "No classifier URL configured; file %s will not be classified", request.file_id
            )
            return None
        return self._executor.submit(self.send, request)

    def send(self, request: ClassificationRequest) -> Optional[int]:
        """POST the request; failures are logged, never raised.

        Returns:
            HTTP status code, or None if the request failed
        """
        try:
            response = self._session.post(self.url, json=request.to_dict(), timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Failed to notify classifier for file %s: %s", request.file_id, e)
            return None

        if response.ok:
            logger.info("Classifier accepted file %s (%s)", request.file_id, response.status_code)
        else:
            logger.error(
                "Classifier rejected file %s (%s): %s",
                request.file_id,
                response.status_code,
                response.text[:200],
            )
        return response.status_code

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
