from __future__ import annotations

import hashlib
import os
import tarfile
import tempfile
from pathlib import Path

from pluginharness.errors import ArchiveError, ChecksumMismatchError

_EXECUTABLE_MODE = 0o755
_CHUNK_SIZE = 64 * 1024


def unpack_single_file(archive: Path, dest: Path) -> Path:
    """
    Unpack a gzipped tarball that contains exactly one regular file to `dest`.

    The file is written to a temporary path next to `dest` and renamed into
    place, so `dest` either does not exist or is complete.
    """
    try:
        with tarfile.open(archive, mode="r:gz") as tar:
            members = tar.getmembers()
            if len(members) != 1 or not members[0].isfile():
                names = sorted(member.name for member in members)
                raise ArchiveError(
                    f"archive {archive} must contain exactly one file, found {len(names)}: {names}"
                )
            source = tar.extractfile(members[0])
            if source is None:
                raise ArchiveError(f"failed to read {members[0].name} from archive {archive}")
            dest.parent.mkdir(parents=True, exist_ok=True)
            with source, tempfile.NamedTemporaryFile("wb", dir=dest.parent, delete=False) as handle:
                temp_path = Path(handle.name)
                try:
                    for chunk in iter(lambda: source.read(_CHUNK_SIZE), b""):
                        handle.write(chunk)
                except BaseException:
                    handle.close()
                    temp_path.unlink(missing_ok=True)
                    raise
    except (tarfile.TarError, EOFError, OSError) as exc:
        raise ArchiveError(f"failed to unpack archive {archive}: {exc}") from exc

    os.chmod(temp_path, _EXECUTABLE_MODE)
    os.replace(temp_path, dest)
    return dest


def sha256_file(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def verify_checksum(path: Path, expected: str) -> None:
    actual = sha256_file(path)
    if actual != expected.strip().lower():
        raise ChecksumMismatchError(
            f"checksum of {path} does not match: expected {expected}, was {actual}"
        )
