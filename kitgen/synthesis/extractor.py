"""Reads the developer's service interface from Go source."""

from __future__ import annotations

from pathlib import PurePath

from ..errors import NotFoundError
from ..fs import FileSystem
from ..models import Interface
from ..source import GoFile, GoParser


class InterfaceExtractor:
    def __init__(self, fs: FileSystem) -> None:
        self.fs = fs

    def load(self, path: PurePath | str) -> GoFile:
        if not self.fs.exists(path):
            raise NotFoundError(f"Service file missing: {path}", artifact=path)
        return GoParser(artifact=path).parse(self.fs.read_file(path))

    def extract(self, path: PurePath | str, interface_name: str) -> Interface:
        """Return the named interface declared in ``path``."""
        return self.from_file(self.load(path), interface_name, artifact=path)

    @staticmethod
    def from_file(gofile: GoFile, interface_name: str, *, artifact: PurePath | str | None = None) -> Interface:
        interface = gofile.find_interface(interface_name)
        if interface is None:
            raise NotFoundError(
                f"Interface {interface_name} not found in package {gofile.package}",
                artifact=artifact,
            )
        return interface


__all__ = ["InterfaceExtractor"]
