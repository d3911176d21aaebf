import logging

import requests
from services.errors import DownloadFailure
from services.file_manager import remove_file

logger = logging.getLogger(__name__)

DOWNLOAD_BLOCK_SIZE = 1024 * 1024


def download_file(url: str, destination: str, timeout: float = 120) -> int:
    """
    Stream a remote file (usually a signed storage URL) to ``destination``.

    Returns the number of bytes written. Non-2xx responses and network errors
    raise DownloadFailure; a partially written file is removed.
    """
    try:
        with requests.get(url, stream=True, timeout=timeout) as response:
            if not response.ok:
                logger.error(
                    f"[download] Failed to download: {response.status_code} {response.reason}"
                )
                raise DownloadFailure(
                    f"Erro ao baixar arquivo: {response.status_code}"
                )

            written = 0
            with open(destination, "wb") as f:
                for block in response.iter_content(chunk_size=DOWNLOAD_BLOCK_SIZE):
                    if block:
                        f.write(block)
                        written += len(block)
    except requests.exceptions.RequestException as e:
        logger.error(f"✗ Network error downloading file: {str(e)}")
        remove_file(destination)
        raise DownloadFailure(f"Erro ao baixar arquivo: {e}") from e
    except OSError:
        remove_file(destination)
        raise

    logger.info(f"[download] Downloaded {written} bytes to {destination}")
    return written
