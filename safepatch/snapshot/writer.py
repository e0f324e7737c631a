"""Write patched text back with the snapshot's encoding, BOM and newlines."""
from __future__ import annotations

import os
import shutil
import uuid
from pathlib import Path

from ..errors import FileAccessError, RoundtripError
from ..logging import get_logger
from ..text import convert_newlines, normalize_newlines
from .hashing import sha256_hex
from .loader import FileSnapshot

logger = get_logger(__name__)


def encode_like_snapshot(snapshot: FileSnapshot, patched_text: str) -> bytes:
    """Produce the bytes ``patched_text`` would have in the snapshot's file format.

    ``patched_text`` is logical text without a BOM character; any newline
    style is accepted and rewritten to the snapshot's.

    Raises:
        RoundtripError: If the encoding cannot represent the text losslessly.
    """
    final_text = convert_newlines(normalize_newlines(patched_text), snapshot.newline)
    encoding = snapshot.encoding

    try:
        payload = encoding.encode(final_text)
    except UnicodeEncodeError as exc:
        raise RoundtripError(
            f"Roundtrip failed: {encoding.name} cannot encode {exc.object[exc.start:exc.end]!r} "
            f"at position {exc.start}.",
            path=str(snapshot.path),
        ) from exc

    final_bytes = encoding.bom + payload if snapshot.has_bom else payload

    try:
        decoded = encoding.decode(final_bytes, snapshot.has_bom)
    except UnicodeDecodeError as exc:
        raise RoundtripError(
            f"Roundtrip failed: re-encoded bytes do not decode as {encoding.name}.",
            path=str(snapshot.path),
        ) from exc

    if decoded != final_text:
        raise RoundtripError(
            f"Roundtrip failed: the text cannot be re-encoded without loss using {encoding.name}.",
            path=str(snapshot.path),
        )
    return final_bytes


def _try_unlink(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError:
        logger.warning("artifact_cleanup_failed", artifact=str(path))


def write_bytes_atomic(path: Path, data: bytes) -> None:
    """Replace ``path`` with ``data`` through a sibling temporary file.

    The target is hard-linked to a backup name, then atomically replaced. If
    the atomic replace fails, the target is deleted and the temporary file
    moved in its place. Temporary and backup files are removed on every exit
    path except when that final move fails: the temporary file (and backup,
    if any) are then left next to the target for inspection.
    """
    directory = path.parent
    if not directory.is_dir():
        raise FileAccessError(f"Directory does not exist: {directory}", path=str(path))

    tmp_path = directory / f"{path.name}.tmp.{uuid.uuid4().hex}"
    bak_path = directory / f"{path.name}.bak.{uuid.uuid4().hex}"
    keep_artifacts = False
    backup_made = False

    try:
        with open(tmp_path, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

        if path.exists():
            try:
                os.link(path, bak_path)
                backup_made = True
            except OSError:
                logger.debug("backup_link_unsupported", path=str(path))
            mode = path.stat().st_mode & 0o777
            os.chmod(tmp_path, mode)

        try:
            os.replace(tmp_path, path)
        except OSError as exc:
            logger.warning("atomic_replace_fallback", path=str(path), reason=str(exc))
            try:
                if path.exists():
                    path.unlink()
                shutil.move(str(tmp_path), str(path))
            except OSError:
                keep_artifacts = True
                logger.error("final_move_failed", path=str(path), tmp_path=str(tmp_path))
                raise
    except OSError as exc:
        raise FileAccessError(f"Failed to write file: {exc.strerror or exc}", path=str(path)) from exc
    finally:
        if not keep_artifacts:
            _try_unlink(tmp_path)
            if backup_made:
                _try_unlink(bak_path)


def write_patched(snapshot: FileSnapshot, patched_text: str) -> str:
    """Write ``patched_text`` to ``snapshot.path`` in the snapshot's format.

    The bytes are verified to decode back to the exact text before anything
    touches the disk.

    Returns:
        Uppercase SHA-256 of the bytes written.

    Raises:
        RoundtripError: If the original encoding cannot hold the text.
        FileAccessError: On any filesystem failure.
    """
    final_bytes = encode_like_snapshot(snapshot, patched_text)
    write_bytes_atomic(Path(snapshot.path), final_bytes)
    new_hash = sha256_hex(final_bytes)
    logger.info(
        "patch_written",
        path=str(snapshot.path),
        size=len(final_bytes),
        encoding=snapshot.encoding.name,
        has_bom=snapshot.has_bom,
        hash=new_hash,
    )
    return new_hash
