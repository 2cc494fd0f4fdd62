"""Sampled-content signatures used to prune byte-exact comparisons."""

import logging

from .errors import EntryIOError
from .models import FileEntry

logger = logging.getLogger(__name__)

SMALL_SIGNATURE = "SMALL"
HASH_MASK = 0xFFFFFFFF


def rolling_hash(data: bytes) -> int:
    """
    Fold bytes into a 32-bit polynomial hash (h = h * 31 + byte).

    Args:
        data: Bytes to hash

    Returns:
        Unsigned 32-bit hash, seeded at 0
    """
    h = 0
    for byte in data:
        h = (h * 31 + byte) & HASH_MASK
    return h


class SignatureSampler:
    """
    Computes a cheap fingerprint from a few fixed windows of a file.

    Equal signatures only make two files candidates; different signatures
    prove that the files differ.
    """

    def __init__(self, sample_points: int = 4, sample_size: int = 4096):
        """
        Initialize the sampler.

        Args:
            sample_points: Number of interior offsets, spread evenly over the file
            sample_size: Bytes read at each offset
        """
        if sample_points < 1:
            raise ValueError(f"sample_points must be positive, got {sample_points}")
        if sample_size < 1:
            raise ValueError(f"sample_size must be positive, got {sample_size}")

        self.sample_points = sample_points
        self.sample_size = sample_size

    def is_small(self, size: int) -> bool:
        """Files this small are always compared in full."""
        return size <= 2 * self.sample_size

    def sample_offsets(self, size: int) -> list[int]:
        """
        Offsets sampled for a file of the given size, ascending and unique.

        Args:
            size: File size in bytes

        Returns:
            Start, evenly spaced interior points, and the final window
        """
        offsets = {0, size - min(self.sample_size, size)}
        for i in range(1, self.sample_points + 1):
            offsets.add(size * i // (self.sample_points + 1))
        return sorted(offsets)

    def signature(self, entry: FileEntry) -> str:
        """
        Compute the signature of a file.

        Args:
            entry: File to fingerprint; its scan-time size is used

        Returns:
            "<size>|SMALL" for small files, otherwise "<size>|<hash>|..." with one
            hash per sampled window in ascending offset order

        Raises:
            EntryIOError: If the file cannot be opened or a window is short
        """
        size = entry.size_bytes
        if self.is_small(size):
            return f"{size}|{SMALL_SIGNATURE}"

        tokens = [str(size)]
        try:
            with open(entry.file_path, "rb") as f:
                for offset in self.sample_offsets(size):
                    expected = min(self.sample_size, size - offset)
                    f.seek(offset)
                    data = f.read(expected)
                    if len(data) != expected:
                        raise EntryIOError(
                            entry.file_path,
                            f"Short read at offset {offset} ({len(data)} of {expected} bytes)",
                        )
                    tokens.append(str(rolling_hash(data)))
        except EntryIOError:
            raise
        except OSError as e:
            raise EntryIOError(entry.file_path, f"Cannot read file ({e.strerror or e})") from e

        signature = "|".join(tokens)
        logger.debug(f"Signature for {entry.filename}: {signature}")
        return signature
