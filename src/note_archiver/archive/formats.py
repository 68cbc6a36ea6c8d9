"""Zip, tar and tar.gz archive writers and readers."""
import gzip
import io
import logging
import lzma
import struct
import tarfile
import time
import zlib
from abc import ABC, abstractmethod
from typing import Dict, Iterable, Iterator, Optional, Tuple

import pyzipper

from note_archiver.archive.errors import (
    ArchiveReadError, ArchiveWriteError, EncryptedEntryError, InvalidPasswordError
)
from note_archiver.models.schema import ArchiveEntry, ArchiveKind

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
AES_KEY_BITS = 256
ENCRYPTED_FLAG = 0x1

# Raised by the zip machinery for corrupt headers, offsets and sizes
ZIP_READ_ERRORS = (
    pyzipper.BadZipFile, OSError, EOFError, ValueError, KeyError,
    NotImplementedError, struct.error, zlib.error, lzma.LZMAError
)

class ArchiveFormat(ABC):
    """Writes a set of files into one archive blob and reads them back.

    ``write`` takes ``(entry name, content)`` pairs and emits file entries
    only; directories are implied by the names. ``read`` yields file
    entries with their content fully read, in archive order.
    """
    kind: ArchiveKind

    @abstractmethod
    def write(self, entries: Iterable[Tuple[str, bytes]], password: Optional[str] = None) -> bytes:
        """Build the archive."""

    @abstractmethod
    def read(self, blob: bytes, password: Optional[str] = None) -> Iterator[ArchiveEntry]:
        """Iterate over the archive's file entries."""

class ZipArchiveFormat(ArchiveFormat):
    """Deflated zip, optionally WinZip AES-256 encrypted.

    Legacy ZipCrypto is never written. Credentials are checked against
    every encrypted entry before the first entry is yielded.
    """
    kind = ArchiveKind.ZIP

    def write(self, entries: Iterable[Tuple[str, bytes]], password: Optional[str] = None) -> bytes:
        buffer = io.BytesIO()
        try:
            with pyzipper.AESZipFile(
                buffer, "w", compression=pyzipper.ZIP_DEFLATED, allowZip64=True
            ) as archive:
                if password is not None:
                    archive.setpassword(password.encode("utf-8"))
                    archive.setencryption(pyzipper.WZ_AES, nbits=AES_KEY_BITS)
                count = 0
                for name, data in entries:
                    archive.writestr(name, data)
                    count += 1
        except (OSError, ValueError, RuntimeError, zlib.error, pyzipper.BadZipFile) as e:
            raise ArchiveWriteError(f"Failed to write zip archive: {e}") from e

        logger.info(f"Wrote zip archive with {count} entries (encrypted: {password is not None})")
        return buffer.getvalue()

    def read(self, blob: bytes, password: Optional[str] = None) -> Iterator[ArchiveEntry]:
        archive = self._open(blob)
        with archive:
            if password is not None:
                archive.setpassword(password.encode("utf-8"))
            self._check_credentials(archive, password)

            for info in archive.infolist():
                if info.is_dir():
                    continue
                try:
                    content = archive.read(info)
                except RuntimeError as e:
                    raise self._credential_error(info.filename, e) from e
                except pyzipper.BadZipFile as e:
                    if info.flag_bits & ENCRYPTED_FLAG:
                        raise InvalidPasswordError(
                            f"Failed to decrypt {info.filename}: {e}"
                        ) from e
                    raise ArchiveReadError(f"Corrupt zip entry {info.filename}: {e}") from e
                except ZIP_READ_ERRORS as e:
                    raise ArchiveReadError(f"Failed to read zip entry {info.filename}: {e}") from e
                yield ArchiveEntry(name=info.filename, content=content)

    def is_encrypted(self, blob: bytes) -> bool:
        """Whether any file entry in the archive is encrypted."""
        with self._open(blob) as archive:
            return any(
                info.flag_bits & ENCRYPTED_FLAG
                for info in archive.infolist() if not info.is_dir()
            )

    def _open(self, blob: bytes) -> pyzipper.AESZipFile:
        try:
            return pyzipper.AESZipFile(io.BytesIO(blob), "r")
        except ZIP_READ_ERRORS as e:
            raise ArchiveReadError(f"Not a valid zip archive: {e}") from e

    def _check_credentials(self, archive: pyzipper.AESZipFile, password: Optional[str]) -> None:
        for info in archive.infolist():
            if info.is_dir() or not info.flag_bits & ENCRYPTED_FLAG:
                continue
            if password is None:
                raise EncryptedEntryError(f"File contains encrypted entry {info.filename}")
            try:
                # Opening validates the password verifier of the entry
                with archive.open(info):
                    pass
            except RuntimeError as e:
                raise self._credential_error(info.filename, e) from e
            except ZIP_READ_ERRORS as e:
                raise ArchiveReadError(f"Corrupt zip entry {info.filename}: {e}") from e

    def _credential_error(self, name: str, error: Exception) -> Exception:
        message = str(error).lower()
        if "password required" in message:
            return EncryptedEntryError(f"File contains encrypted entry {name}")
        if "password" in message:
            return InvalidPasswordError(f"Invalid password for {name}")
        return ArchiveReadError(f"Failed to read zip entry {name}: {error}")

class TarArchiveFormat(ArchiveFormat):
    """POSIX (pax) tar of regular files. Passwords do not apply."""
    kind = ArchiveKind.TAR

    def write(self, entries: Iterable[Tuple[str, bytes]], password: Optional[str] = None) -> bytes:
        if password is not None:
            logger.debug(f"Ignoring password for {self.kind.value} archive")

        buffer = io.BytesIO()
        mtime = int(time.time())
        count = 0
        try:
            with tarfile.open(fileobj=buffer, mode="w", format=tarfile.PAX_FORMAT) as archive:
                for name, data in entries:
                    info = tarfile.TarInfo(name=name)
                    info.size = len(data)
                    info.mtime = mtime
                    info.mode = 0o644
                    info.type = tarfile.REGTYPE
                    archive.addfile(info, io.BytesIO(data))
                    count += 1
        except (OSError, ValueError, tarfile.TarError) as e:
            raise ArchiveWriteError(f"Failed to write tar archive: {e}") from e

        logger.info(f"Wrote tar archive with {count} entries")
        return buffer.getvalue()

    def read(self, blob: bytes, password: Optional[str] = None) -> Iterator[ArchiveEntry]:
        return self._read_tar(blob)

    def _read_tar(self, tar_bytes: bytes) -> Iterator[ArchiveEntry]:
        try:
            archive = tarfile.open(fileobj=io.BytesIO(tar_bytes), mode="r:")
            # Reading every header up front rejects a malformed stream
            # before any entry reaches the store
            members = archive.getmembers()
        except (tarfile.TarError, OSError, EOFError, ValueError) as e:
            raise ArchiveReadError(f"Not a valid tar archive: {e}") from e

        with archive:
            for member in members:
                if not member.isfile():
                    logger.debug(f"Skipping tar member {member.name} of type {member.type!r}")
                    continue
                try:
                    handle = archive.extractfile(member)
                    chunks = []
                    while True:
                        chunk = handle.read(CHUNK_SIZE)
                        if not chunk:
                            break
                        chunks.append(chunk)
                except (tarfile.TarError, OSError, EOFError) as e:
                    raise ArchiveReadError(f"Failed to read tar entry {member.name}: {e}") from e
                content = b"".join(chunks)
                if len(content) != member.size:
                    raise ArchiveReadError(
                        f"Truncated tar entry {member.name}: "
                        f"expected {member.size} bytes, got {len(content)}"
                    )
                yield ArchiveEntry(name=member.name, content=content)

class TarGzArchiveFormat(TarArchiveFormat):
    """Tar built in full, then gzip-compressed as one unit."""
    kind = ArchiveKind.TAR_GZ

    def write(self, entries: Iterable[Tuple[str, bytes]], password: Optional[str] = None) -> bytes:
        tar_bytes = super().write(entries, password)
        try:
            return gzip.compress(tar_bytes)
        except (OSError, zlib.error) as e:
            raise ArchiveWriteError(f"Failed to gzip tar archive: {e}") from e

    def read(self, blob: bytes, password: Optional[str] = None) -> Iterator[ArchiveEntry]:
        try:
            tar_bytes = gzip.decompress(blob)
        except (OSError, EOFError, zlib.error) as e:
            raise ArchiveReadError(f"Not a valid gzip stream: {e}") from e
        return self._read_tar(tar_bytes)

FORMATS: Dict[ArchiveKind, ArchiveFormat] = {
    ArchiveKind.ZIP: ZipArchiveFormat(),
    ArchiveKind.TAR: TarArchiveFormat(),
    ArchiveKind.TAR_GZ: TarGzArchiveFormat(),
}

def get_archive_format(kind: ArchiveKind) -> ArchiveFormat:
    """Return the writer/reader strategy for an archive kind."""
    return FORMATS[ArchiveKind(kind)]
