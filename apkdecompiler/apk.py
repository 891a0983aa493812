"""Reading dex files, the manifest and resources out of an APK or XAPK."""

from __future__ import annotations

import io
import posixpath
import zipfile
from dataclasses import dataclass, field

from .dex import Dex
from .model import Config
from .reader import ByteReader, ParseError
from .resource_table import ResourceTable

_MEMBER_ERRORS = (ParseError, zipfile.BadZipFile, RuntimeError, NotImplementedError)


class ApkNotFoundInXapkError(ParseError):
    """Raised when an archive is neither an APK nor holds a base APK."""


@dataclass(frozen=True)
class ParseConfig:
    """Options for reading an APK.

    ``sanitize_annotations`` also collects the strings used by annotations.
    ``fail_on_invalid_dex`` raises on a dex file that cannot be decoded
    (usually an encrypted one) instead of skipping it;
    ``fail_on_invalid_resource`` does the same for resource tables.
    """

    sanitize_annotations: bool = False
    fail_on_invalid_dex: bool = False
    fail_on_invalid_resource: bool = False


def _has_dex_and_manifest(archive: zipfile.ZipFile) -> bool:
    names = archive.namelist()
    return any(n.endswith(".dex") for n in names) and any(
        n.endswith("AndroidManifest.xml") for n in names
    )


def _extract_apk_from_xapk(archive: zipfile.ZipFile) -> zipfile.ZipFile:
    for info in archive.infolist():
        if not info.filename.endswith(".apk"):
            continue
        base_name = posixpath.basename(info.filename)
        if base_name.startswith("config."):
            continue
        if base_name.count(".") == 1:
            continue
        return zipfile.ZipFile(io.BytesIO(archive.read(info)))
    raise ApkNotFoundInXapkError("apk not found in xapk")


@dataclass
class Apk:
    """The decoded contents of an APK.

    ``manifest_xml`` holds the manifest as stored, in binary XML form.
    """

    manifest_xml: bytes = b""
    dexes: list[Dex] = field(default_factory=list)
    resources: ResourceTable = field(default_factory=ResourceTable)
    config: Config = field(default_factory=Config)

    @classmethod
    def from_zip(cls, archive: zipfile.ZipFile, config: ParseConfig | None = None) -> Apk:
        """Read an APK, or the base APK inside an XAPK, from an open archive."""
        config = config or ParseConfig()
        if not _has_dex_and_manifest(archive):
            archive = _extract_apk_from_xapk(archive)

        apk = cls(config=Config(sanitize_annotations=config.sanitize_annotations))
        for info in archive.infolist():
            name = info.filename
            if name.endswith("AndroidManifest.xml"):
                apk.manifest_xml = archive.read(info)
            if name.endswith(".dex"):
                try:
                    dex = Dex.parse(archive.read(info), apk.config)
                except _MEMBER_ERRORS:
                    if config.fail_on_invalid_dex:
                        raise
                    continue
                dex.filename = name
                apk.dexes.append(dex)
            if name.endswith(".arsc"):
                try:
                    apk.resources = ResourceTable.parse(ByteReader(archive.read(info)))
                except _MEMBER_ERRORS:
                    if config.fail_on_invalid_resource:
                        raise
                    continue
        return apk

    @classmethod
    def open(cls, source, config: ParseConfig | None = None) -> Apk:
        """Read an APK from a path, a binary file object or its bytes."""
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        with zipfile.ZipFile(source) as archive:
            return cls.from_zip(archive, config)