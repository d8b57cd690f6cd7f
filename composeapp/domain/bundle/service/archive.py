"""ArchiveBuilder - packs a bundle directory into a gzip-compressed tarball."""

import io
import logging
import os
import stat
import tarfile
import time
from collections.abc import Iterator
from pathlib import Path

from composeapp.domain.bundle.model.ignore import DEFAULT_IGNORE_FILE, IgnoreRules
from composeapp.domain.shared.error import ArchiveError, UnsupportedEntryError
from composeapp.domain.shared.event import FileArchived, PathIgnored
from composeapp.domain.shared.port.progress import ProgressReporter
from composeapp.domain.shared.service import Service

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTOR_FILE = "docker-compose.yml"


class ArchiveBuilder(Service):
    """Builds the bundle archive for a directory.

    Directories contribute no entries. A directory matching an ignore pattern
    is pruned together with everything below it. The root-level descriptor
    entry always carries the in-memory descriptor, and is appended when the
    directory has no such file. The entry count therefore equals the number of
    regular files and symlinks only when the descriptor file exists on disk;
    otherwise there is one extra entry. Entry order follows a sorted walk, but
    timestamps come from the filesystem so output bytes are not reproducible.
    """

    progress: ProgressReporter
    ignore_file: str = DEFAULT_IGNORE_FILE
    descriptor_file: str = DEFAULT_DESCRIPTOR_FILE

    def build_archive(self, descriptor: bytes, root: Path) -> bytes:
        """Archive ``root`` with ``descriptor`` substituted for the descriptor file.

        Raises:
            UnsupportedEntryError: If the tree holds a device, fifo or socket.
            ArchiveError: If the tree cannot be walked or read.
        """
        warned: set[str] = set()
        have_descriptor = False

        buf = io.BytesIO()
        try:
            rules = IgnoreRules.load(root, self.ignore_file)
            with tarfile.open(fileobj=buf, mode="w:gz") as tar:
                for entry, name in self._walk(root, root, rules, warned):
                    if name == self.descriptor_file:
                        st = entry.stat(follow_symlinks=False)
                        self._add_descriptor(tar, descriptor, st.st_mtime)
                        have_descriptor = True
                    else:
                        self._add_entry(tar, entry, name)

                if not have_descriptor:
                    self._add_descriptor(tar, descriptor, time.time())
        except OSError as e:
            raise ArchiveError(f"Tar: Can't archive {root}: {e}") from e

        data = buf.getvalue()
        logger.debug(f"Built bundle archive from {root}: {len(data)} bytes")
        return data

    def _walk(
        self, root: Path, directory: Path, rules: IgnoreRules, warned: set[str]
    ) -> Iterator[tuple[os.DirEntry, str]]:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)

        for entry in entries:
            name = Path(entry.path).relative_to(root).as_posix()
            pattern = rules.match(name)
            if pattern is not None:
                if pattern not in warned:
                    warned.add(pattern)
                    self.progress.emit(PathIgnored(pattern=pattern, path=name))
                continue

            if entry.is_dir(follow_symlinks=False):
                yield from self._walk(root, Path(entry.path), rules, warned)
            else:
                yield entry, name

    def _add_entry(self, tar: tarfile.TarFile, entry: os.DirEntry, name: str) -> None:
        mode = entry.stat(follow_symlinks=False).st_mode
        if stat.S_ISREG(mode):
            info = tar.gettarinfo(entry.path, arcname=name)
            with open(entry.path, "rb") as f:
                tar.addfile(info, f)
        elif stat.S_ISLNK(mode):
            info = tar.gettarinfo(entry.path, arcname=name)
            tar.addfile(info)
        else:
            raise UnsupportedEntryError(
                f"Tar: Can't tar non regular types yet: {name}", path=name
            )
        self.progress.emit(FileArchived(name=name, size=info.size))

    def _add_descriptor(self, tar: tarfile.TarFile, descriptor: bytes, mtime: float) -> None:
        info = tarfile.TarInfo(name=self.descriptor_file)
        info.size = len(descriptor)
        info.mode = 0o644
        info.mtime = int(mtime)
        tar.addfile(info, io.BytesIO(descriptor))
        self.progress.emit(FileArchived(name=self.descriptor_file, size=info.size))
