"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/hasher.py
Implements file hashing utilities using the FileRecord class and pluggable hash algorithms.

- calculate_digest() is the digest primitive: path + algorithm -> raw digest bytes
- HasherImpl computes full content digests (hashlib) and front-chunk hashes (xxHash64),
  caching the full digest on the FileRecord
- Reads are chunked; a read that returns a different byte count than the size seen
  at stat time raises TruncatedRead
"""

import hashlib
import logging
from typing import Optional

import xxhash

from dupfinder.core.errors import UnreadableFile, TruncatedRead
from dupfinder.core.interfaces import Hasher, HashAlgorithm
from dupfinder.core.models import Digest, DigestAlgorithm, FileRecord

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 1024 * 1024
FRONT_CHUNK_SIZE = 64 * 1024


# Use the same way to implement and use any other hashing algorithm
class HashlibAlgorithmImpl(HashAlgorithm):
    def __init__(self, algorithm: DigestAlgorithm):
        self.algorithm = algorithm

    def new(self):
        return hashlib.new(self.algorithm.value)


class XXHashAlgorithmImpl(HashAlgorithm):
    @staticmethod
    def new():
        return xxhash.xxh64()


def _hash_stream(
        path: str,
        algorithm: HashAlgorithm,
        limit: Optional[int] = None,
        expected_size: Optional[int] = None,
        chunk_size: int = READ_CHUNK_SIZE
) -> bytes:
    """
    Feeds the file (or its first `limit` bytes) into a fresh hash object.
    Raises UnreadableFile / TruncatedRead.
    """
    hash_obj = algorithm.new()
    total = 0
    try:
        with open(path, 'rb') as f:
            while limit is None or total < limit:
                to_read = chunk_size if limit is None else min(chunk_size, limit - total)
                chunk = f.read(to_read)
                if not chunk:
                    break
                hash_obj.update(chunk)
                total += len(chunk)
            # One extra byte tells a grown file apart from an intact one
            grown = limit is None and expected_size is not None and f.read(1) != b''
    except OSError as e:
        raise UnreadableFile(path, e.strerror or str(e)) from e

    if expected_size is not None:
        wanted = expected_size if limit is None else min(limit, expected_size)
        if total != wanted or grown:
            raise TruncatedRead(path, expected=wanted, actual=total + (1 if grown else 0))
    return hash_obj.digest()


def calculate_digest(
        path: str,
        algorithm: DigestAlgorithm = DigestAlgorithm.SHA256,
        expected_size: Optional[int] = None,
        chunk_size: int = READ_CHUNK_SIZE
) -> bytes:
    """
    Computes the digest of the whole file content.

    Args:
        path: File to read
        algorithm: One of the supported digest algorithms
        expected_size: Size recorded at stat time; a mismatch raises TruncatedRead
        chunk_size: Read buffer size

    Returns:
        bytes: Raw digest, algorithm.digest_size bytes long

    Raises:
        UnreadableFile: If the file cannot be opened or read
        TruncatedRead: If the file changed size since it was stat'ed
    """
    return _hash_stream(
        path,
        HashlibAlgorithmImpl(algorithm),
        expected_size=expected_size,
        chunk_size=chunk_size
    )


class HasherImpl(Hasher):
    """
    A hasher bound to one digest algorithm.
    Computes and caches content digests of FileRecords.
    """

    def __init__(
            self,
            algorithm: DigestAlgorithm = DigestAlgorithm.SHA256,
            front_algorithm: Optional[HashAlgorithm] = None,
            chunk_size: int = READ_CHUNK_SIZE
    ):
        self.algorithm = algorithm
        self.front_algorithm = front_algorithm or XXHashAlgorithmImpl()
        self.chunk_size = chunk_size

    def compute_digest(self, file: FileRecord) -> Digest:
        """Computes and caches the digest of the entire file."""
        if file.digest is not None and file.digest.algorithm is self.algorithm:
            return file.digest
        value = calculate_digest(
            file.path,
            self.algorithm,
            expected_size=file.size,
            chunk_size=self.chunk_size
        )
        digest = Digest(algorithm=self.algorithm, value=value)
        file.set_digest(digest)
        return digest

    def compute_front_hash(self, file: FileRecord, front_size: int = FRONT_CHUNK_SIZE) -> bytes:
        """Hash of the first front_size bytes, used only to split size buckets."""
        return _hash_stream(
            file.path,
            self.front_algorithm,
            limit=front_size,
            expected_size=file.size,
            chunk_size=self.chunk_size
        )
