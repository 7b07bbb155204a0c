"""Download initiation for extracted media."""

import re
import time
from pathlib import Path
from typing import Callable, Optional

import requests
from fake_useragent import UserAgent

from ..extractor.base import ExtractionResult, MediaDescriptor


_FORMAT_PARAM = re.compile(r'[?&]format=(\w+)')


def file_extension(url: str) -> str:
    """Guess a file extension from a media URL."""
    path = url.split('?')[0].lower()
    for ext in ("mp4", "mov", "png", "gif", "jpeg", "webp"):
        if path.endswith(f".{ext}"):
            return ext

    match = _FORMAT_PARAM.search(url)
    if match:
        return match.group(1).lower()
    return "jpg"


def suggest_filename(descriptor: MediaDescriptor, post_id: Optional[str], index: int) -> str:
    """Filename for the index-th (1-based) media item of a post."""
    stem = post_id or str(int(time.time() * 1000))
    return f"twitter_media_{stem}_{index}.{file_extension(descriptor.url)}"


class MediaDownloader:
    """Saves media files to a local directory."""

    def __init__(self, save_dir, timeout: float = 30):
        self.save_dir = Path(save_dir)
        self.save_dir.mkdir(parents=True, exist_ok=True)
        self.timeout = timeout
        self.ua = UserAgent()

    def enqueue(self, url: str, suggested_filename: str, headers: Optional[dict] = None) -> Path:
        """
        Download url into the save directory.

        Args:
            url: Media URL
            suggested_filename: File name to save under; a numeric suffix
                is added if the name is taken
            headers: Extra request headers

        Returns:
            Path of the written file

        Raises:
            requests.RequestException: if the download fails
        """
        request_headers = {
            'User-Agent': self.ua.random,
            'Referer': 'https://twitter.com/',
        }
        request_headers.update(headers or {})

        with requests.get(url, headers=request_headers, stream=True, timeout=self.timeout) as response:
            response.raise_for_status()

            filepath = self._free_path(self._clean_filename(suggested_filename))
            try:
                with open(filepath, 'wb') as f:
                    for chunk in response.iter_content(chunk_size=8192):
                        f.write(chunk)
            except (requests.RequestException, OSError):
                # No partial files
                filepath.unlink(missing_ok=True)
                raise
        return filepath

    def download_all(
        self,
        result: ExtractionResult,
        headers: Optional[dict] = None,
        progress_callback: Optional[Callable[[str], None]] = None,
        error_callback: Optional[Callable[[MediaDescriptor, Exception], None]] = None,
    ) -> list[Path]:
        """Download every descriptor of a result, skipping ones that fail."""
        paths = []
        total = len(result)
        for index, descriptor in enumerate(result, start=1):
            filename = suggest_filename(descriptor, result.post_id, index)
            if progress_callback:
                progress_callback(f"Downloading {index}/{total}: {filename}")
            try:
                paths.append(self.enqueue(descriptor.url, filename, headers=headers))
            except (requests.RequestException, OSError) as e:
                if error_callback:
                    error_callback(descriptor, e)
        return paths

    def _clean_filename(self, filename: str) -> str:
        return "".join(c for c in filename if c.isalnum() or c in " ._-()").strip() or "media"

    def _free_path(self, filename: str) -> Path:
        filepath = self.save_dir / filename
        counter = 1
        original = filepath
        while filepath.exists():
            filepath = original.with_name(f"{original.stem}_{counter}{original.suffix}")
            counter += 1
        return filepath
