"""Rewriting of extension XML sources so older 1C platforms accept them."""

from __future__ import annotations

import os
import re
from pathlib import Path

# Format version used when the platform version cannot be detected; it is the
# format of platforms older than 8.3.14.
DEFAULT_FORMAT_VERSION = "2.7"

# Format version of 1C 8.5.x.
PLATFORM_85_FORMAT_VERSION = "2.21"

# Minimum 8.3 minor version -> XML dump format version it introduced.
# Sorted by minor version, descending.
_PLATFORM_FORMAT_VERSIONS: tuple[tuple[int, str], ...] = (
    (27, "2.20"),
    (26, "2.19"),
    (25, "2.18"),
    (24, "2.17"),
    (23, "2.16"),
    (22, "2.15"),
    (21, "2.14"),
    (20, "2.13"),
    (19, "2.12"),
    (18, "2.11"),
    (17, "2.10"),
    (16, "2.9.1"),
    (15, "2.9"),
    (14, "2.8"),
)

# The "2." prefix keeps the XML declaration (version="1.0") untouched.
_VERSION_ATTR_RE = re.compile(rb'(version=")2\.\d+(?:\.\d+)?(")')

_PLATFORM_VERSION_RE = re.compile(r"8\.(\d+)\.(\d+)", re.ASCII)

_KEEP_MAPPING_RE = re.compile(
    rb"\s*<KeepMappingToExtendedConfigurationObjectsByIDs>[^<]*"
    rb"</KeepMappingToExtendedConfigurationObjectsByIDs>"
)

_INTERNAL_INFO_RE = re.compile(
    rb"\s*<InternalInfo\s*/>|\s*<InternalInfo>.*?</InternalInfo>", re.DOTALL
)

# Role ClassId that platforms 8.3.13 and below do not recognise.
_ROLE_CONTAINED_OBJECT_RE = re.compile(
    rb"\s*<xr:ContainedObject>\s*<xr:ClassId>fb282519-d103-4dd3-bc12-cb271d631dfc</xr:ClassId>"
    rb"\s*<xr:ObjectId>[^<]*</xr:ObjectId>\s*</xr:ContainedObject>",
    re.DOTALL,
)

_DEFAULT_RUN_MODE_RE = re.compile(rb"\s*<DefaultRunMode>[^<]*</DefaultRunMode>")

_INHERITED_TAGS = (
    "DefaultRunMode|UsePurposes|ScriptVariant|DefaultRoles|"
    "Vendor|Version|DefaultLanguage|BriefInformation|DetailedInformation|"
    "Copyright|VendorInformationAddress|ConfigurationInformationAddress"
)
_INHERITED_PROPERTY_RE = re.compile(
    rf"\s*<(?:{_INHERITED_TAGS})>.*?</(?:{_INHERITED_TAGS})>".encode("ascii"),
    re.DOTALL,
)

_CONFIGURATION_FILE = "Configuration.xml"


def platform_older_than(major: int, minor: int, target_major: int, target_minor: int) -> bool:
    """Return True if ``(major, minor)`` precedes ``(target_major, target_minor)``."""
    return (major, minor) < (target_major, target_minor)


def extract_platform_minor(platform_exe: str) -> tuple[int, int] | None:
    """Return ``(major, minor)`` of the ``8.X.Y`` version found in a path, or None."""
    match = _PLATFORM_VERSION_RE.search(platform_exe)
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


def parse_platform_version(platform_exe: str, override_version: str) -> tuple[int, int]:
    """Return the platform ``(major, minor)``; the override wins, ``(0, 0)`` if unknown."""
    parsed = extract_platform_minor(override_version or platform_exe)
    return parsed if parsed is not None else (0, 0)


def format_version_for_platform(platform_exe: str) -> str:
    """Return the highest XML dump format version the platform at this path accepts."""
    parsed = extract_platform_minor(platform_exe)
    if parsed is None:
        return DEFAULT_FORMAT_VERSION
    major, minor = parsed
    if major >= 5:
        return PLATFORM_85_FORMAT_VERSION
    if major == 3:
        for min_minor, version in _PLATFORM_FORMAT_VERSIONS:
            if minor >= min_minor:
                return version
    return DEFAULT_FORMAT_VERSION


def extract_xml_tag(xml: str, tag: str) -> str:
    """Return the text of the first ``<tag>value</tag>``, or an empty string."""
    name = re.escape(tag)
    match = re.search(rf"<{name}>([^<]+)</{name}>", xml)
    return match.group(1) if match else ""


def replace_or_insert_xml_tag(content: str, tag_name: str, value: str) -> str:
    """Replace the value of ``tag_name`` or insert the tag before ``</Properties>``."""
    name = re.escape(tag_name)
    pattern = re.compile(rf"<{name}>[^<]+</{name}>")
    replacement = f"<{tag_name}>{value}</{tag_name}>"
    if pattern.search(content):
        return pattern.sub(lambda _: replacement, content)
    return content.replace("</Properties>", f"\t\t\t{replacement}\n\t\t</Properties>", 1)


def patch_extension_xml(path: str | os.PathLike[str], compat_mode: str, interface_mode: str) -> None:
    """Set the extension and interface compatibility modes in Configuration.xml.

    Empty values leave the corresponding tag untouched.
    """
    file = Path(path)
    content = file.read_bytes().decode("utf-8")
    if compat_mode:
        content = replace_or_insert_xml_tag(
            content, "ConfigurationExtensionCompatibilityMode", compat_mode
        )
    if interface_mode:
        content = replace_or_insert_xml_tag(content, "InterfaceCompatibilityMode", interface_mode)
    file.write_bytes(content.encode("utf-8"))


def _xml_files(directory: str | os.PathLike[str]):
    for root, _dirs, files in os.walk(directory):
        for name in files:
            if name.lower().endswith(".xml"):
                yield Path(root, name)


def patch_format_version(directory: str | os.PathLike[str], target_version: str) -> None:
    """Rewrite the dump format ``version="2.X"`` attribute in every XML file below ``directory``."""
    new_version = target_version.encode("ascii")
    for path in _xml_files(directory):
        data = path.read_bytes()
        patched = _VERSION_ATTR_RE.sub(lambda m: m.group(1) + new_version + m.group(2), data)
        if patched != data:
            path.write_bytes(patched)


def _strip_file(path: Path, *patterns: re.Pattern[bytes]) -> None:
    data = path.read_bytes()
    for pattern in patterns:
        data = pattern.sub(b"", data)
    path.write_bytes(data)


def strip_inherited_properties(cfg_path: str | os.PathLike[str]) -> None:
    """Remove properties that override the base configuration's inherited ones."""
    _strip_file(Path(cfg_path), _INHERITED_PROPERTY_RE)


def strip_default_run_mode(cfg_path: str | os.PathLike[str]) -> None:
    """Remove the ``DefaultRunMode`` element from Configuration.xml."""
    _strip_file(Path(cfg_path), _DEFAULT_RUN_MODE_RE)


def strip_unsupported_elements(ext_dir: str | os.PathLike[str]) -> None:
    """Remove XML elements that platforms before 8.3.15 reject.

    Configuration.xml loses KeepMapping and the Role ContainedObject entry but
    keeps its InternalInfo; every other XML file loses its InternalInfo section.
    """
    _strip_file(Path(ext_dir, _CONFIGURATION_FILE), _KEEP_MAPPING_RE, _ROLE_CONTAINED_OBJECT_RE)
    for path in _xml_files(ext_dir):
        if path.name.lower() == _CONFIGURATION_FILE.lower():
            continue
        data = path.read_bytes()
        patched = _INTERNAL_INFO_RE.sub(b"", data)
        if patched != data:
            path.write_bytes(patched)