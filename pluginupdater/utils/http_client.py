from typing import BinaryIO, TypeVar
from urllib.parse import urlparse

import msgspec
import requests
from loguru import logger

from pluginupdater.utils.constants import (
    API_TIMEOUT,
    DOWNLOAD_CHUNK_SIZE,
    DOWNLOAD_TIMEOUT,
    GITHUB_API_HOST,
    USER_AGENT,
)
from pluginupdater.utils.exception import DownloadError, ResolutionError

T = TypeVar("T")


class UpstreamClient:
    """
    Thin wrapper around a requests session used for every upstream call.

    All requests carry the application User-Agent. GitHub API requests also
    carry the configured token, which raises the anonymous rate limit.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        github_token: str = "",
    ) -> None:
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})
        self.github_token = github_token.strip()

    def _headers_for(self, url: str, accept: str) -> dict[str, str]:
        headers = {"Accept": accept}
        if self.github_token and urlparse(url).hostname == GITHUB_API_HOST:
            headers["Authorization"] = f"Bearer {self.github_token}"
        return headers

    def fetch_json(self, url: str, target_type: type[T]) -> T:
        """
        GET a JSON document and decode it into the given type.

        Args:
            url: Document URL
            target_type: msgspec-compatible type the body is decoded into

        Returns:
            The decoded document

        Raises:
            ResolutionError: On transport failure, non-2xx status, or a body
                that does not decode into the requested type
        """
        logger.debug(f"Fetching {url}")
        try:
            response = self.session.get(
                url,
                headers=self._headers_for(url, "application/json"),
                timeout=API_TIMEOUT,
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            raise ResolutionError(
                f"Request to {url} failed with HTTP {e.response.status_code}"
                if e.response is not None
                else f"Request to {url} failed: {e}"
            ) from e
        except requests.RequestException as e:
            raise ResolutionError(f"Request to {url} failed: {e}") from e

        try:
            return msgspec.json.decode(response.content, type=target_type)
        except msgspec.ValidationError as e:
            raise ResolutionError(f"Unexpected response from {url}: {e}") from e
        except msgspec.DecodeError as e:
            raise ResolutionError(f"Invalid JSON from {url}: {e}") from e

    def download(self, url: str, destination: BinaryIO) -> int:
        """
        Stream an artifact into an open binary file.

        :param url: artifact URL
        :param destination: file object the body is written to
        :return: number of bytes written
        :raises DownloadError: on transport failure or non-2xx status
        """
        logger.debug(f"Downloading {url}")
        written = 0
        try:
            with self.session.get(
                url,
                headers=self._headers_for(url, "application/octet-stream, */*"),
                timeout=DOWNLOAD_TIMEOUT,
                stream=True,
            ) as response:
                response.raise_for_status()
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    if chunk:
                        destination.write(chunk)
                        written += len(chunk)
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else "error"
            raise DownloadError(f"Download failed: HTTP {status} for {url}") from e
        except requests.RequestException as e:
            raise DownloadError(f"Download failed: {e}") from e
        except OSError as e:
            raise DownloadError(f"Download failed: unable to write file: {e}") from e
        return written

    def close(self) -> None:
        self.session.close()
