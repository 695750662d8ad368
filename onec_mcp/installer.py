"""Installation of the MCP extension into a 1C infobase through DESIGNER."""

from __future__ import annotations

import functools
import glob
import os
import shutil
import subprocess
import sys
import tempfile
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from onec_mcp.xmlpatch import (
    format_version_for_platform,
    parse_platform_version,
    patch_extension_xml,
    patch_format_version,
    platform_older_than,
    strip_default_run_mode,
    strip_inherited_properties,
    strip_unsupported_elements,
)

EXTENSION_NAME = "MCP_HTTPService"

_BOM = b"\xef\xbb\xbf"
_ALREADY_EXISTS = "Уже существует"
_RUN_MODE_MISMATCH = "ОсновнойРежимЗапуска"
_COMPAT_MODE = "режим совместимости"
_INHERITED_OVERRIDE = "переопределение свойств заимствованных объектов"
_UNSUPPORTED_MARKERS = (
    "KeepMappingToExtendedConfigurationObjectsByIDs",
    "InternalInfo",
    "идентификатор класса",
)
_ROLE_NOTE = (
    "Примечание: роль MCP_ОсновнаяРоль установлена с правами доступа к HTTP-сервису.",
    "Пользователям с ролью \"Полные права\" дополнительных действий не требуется.",
    "Для остальных пользователей назначьте роль MCP_ОсновнаяРоль вручную в Конфигураторе.",
)


class InstallError(Exception):
    """Raised when the extension cannot be installed."""


class DesignerError(InstallError):
    """Raised when a DESIGNER run fails to start or exits unsuccessfully."""

    def __init__(self, message: str, exit_code: int | None = None, log: str = "") -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.log = log


@contextmanager
def _step(message: str) -> Iterator[None]:
    try:
        yield
    except OSError as exc:
        raise InstallError(f"{message}: {exc}") from exc


def _print_role_note() -> None:
    for line in _ROLE_NOTE:
        print(line, file=sys.stderr)


def build_designer_args(db_path: str, server_mode: bool, db_user: str, db_password: str,
                        log_path: str, *args: str) -> list[str]:
    """Return the DESIGNER command-line arguments (without the executable)."""
    result = ["DESIGNER", "/S" if server_mode else "/F", db_path]
    if db_user:
        result += ["/N", db_user]
    if db_password:
        result += ["/P", db_password]
    result += ["/WA-", "/DisableStartupDialogs", "/DisableStartupMessages"]
    result += list(args)
    result += ["/Out", log_path]
    return result


def _decode_log(data: bytes) -> str:
    data = data.lstrip(_BOM)
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        # Older platforms on Windows write the log in Windows-1251.
        text = data.decode("cp1251", errors="replace")
    return text.strip()


def run_designer(platform_exe: str, db_path: str, server_mode: bool, db_user: str,
                 db_password: str, *args: str) -> str:
    """Run DESIGNER with ``args`` and return its log; raise :class:`DesignerError` on failure."""
    fd, log_path = tempfile.mkstemp(prefix="mcp-1c-log-", suffix=".txt")
    os.close(fd)
    try:
        command = [platform_exe, *build_designer_args(
            db_path, server_mode, db_user, db_password, log_path, *args)]
        try:
            completed = subprocess.run(command, capture_output=True, check=False)
        except OSError as exc:
            raise DesignerError(f"1C DESIGNER failed to start: {platform_exe}") from exc
        try:
            log = _decode_log(Path(log_path).read_bytes())
        except OSError:
            log = ""
    finally:
        try:
            os.remove(log_path)
        except OSError:
            pass

    code = completed.returncode
    if code != 0:
        if log:
            raise DesignerError(f"1C DESIGNER failed (exit code {code}):\n{log}", code, log)
        raise DesignerError(f"1C DESIGNER failed with exit code {code} (no log output)", code)
    if log:
        print(log)
    return log


def platform_patterns() -> list[str]:
    """Return glob patterns where the 1C platform executable is installed on this OS."""
    if sys.platform == "win32":
        return [
            r"C:\Program Files\1cv8\8.*\bin\1cv8.exe",
            r"C:\Program Files (x86)\1cv8\8.*\bin\1cv8.exe",
            r"C:\Program Files\1cv8t\8.*\bin\1cv8t.exe",
            r"C:\Program Files (x86)\1cv8t\8.*\bin\1cv8t.exe",
            r"C:\Program Files\1cv82\8.*\bin\1cv8.exe",
            r"C:\Program Files (x86)\1cv82\8.*\bin\1cv8.exe",
        ]
    if sys.platform == "darwin":
        return [
            "/Applications/1cv8.localized/*/1cv8.app/Contents/MacOS/1cv8",
            "/Applications/1cv8t.localized/*/1cv8t.app/Contents/MacOS/1cv8t",
        ]
    if sys.platform.startswith("linux"):
        return [
            "/opt/1cv8/x86_64/8.3.*/1cv8",
            "/opt/1cv8/x86_64/8.5.*/1cv8",
            "/opt/1C/v8.3/x86_64/1cv8",
        ]
    return []


def find_platform() -> str:
    """Return the lexically latest platform executable from the first matching pattern."""
    for pattern in platform_patterns():
        matches = sorted(glob.glob(pattern))
        if matches:
            return matches[-1]
    raise InstallError("1C platform not found in standard paths")


def extract_tree(source_dir: str | os.PathLike[str], dest_dir: str | os.PathLike[str]) -> None:
    """Copy the extension sources below ``source_dir`` into ``dest_dir``."""
    shutil.copytree(source_dir, dest_dir, dirs_exist_ok=True)


_Designer = Callable[..., str]


def _attempt(designer: _Designer, *args: str) -> DesignerError | None:
    try:
        designer(*args)
    except DesignerError as exc:
        return exc
    return None


def _prepatch(ext_dir: Path, cfg_path: Path, major: int, minor: int) -> None:
    if major <= 0:
        return
    if platform_older_than(major, minor, 3, 10):
        raise InstallError(
            f"платформа 8.{major}.{minor} не поддерживается, минимальная версия 8.3.10"
        )
    if platform_older_than(major, minor, 3, 14):
        with _step("pre-patching extension compat mode"):
            patch_extension_xml(cfg_path, "Version8_3_10", "")
        with _step("pre-patching unsupported elements"):
            strip_unsupported_elements(ext_dir)
        with _step("pre-patching inherited properties"):
            strip_inherited_properties(cfg_path)
        _print_role_note()


def _load_extension(designer: _Designer, ext_dir: Path, cfg_path: Path) -> None:
    print("Loading extension into database...")
    load = functools.partial(
        _attempt, designer, "/LoadConfigFromFiles", str(ext_dir), "-Extension", EXTENSION_NAME
    )
    err = load()

    if err is not None and _ALREADY_EXISTS in str(err):
        try:
            designer("/ManageCfgExtensions", "-delete", "-Extension", EXTENSION_NAME)
        except DesignerError as exc:
            raise InstallError(f"deleting old extension before retry: {exc}") from exc
        print("Removed old extension:", EXTENSION_NAME)
        err = load()

    if err is None:
        return

    if any(marker in str(err) for marker in _UNSUPPORTED_MARKERS):
        print("Retrying without unsupported XML elements (old platform)...")
        with _step("loading extension config: strip unsupported elements"):
            strip_unsupported_elements(ext_dir)
        err = load()

    if err is not None and _RUN_MODE_MISMATCH in str(err):
        print("Retrying without DefaultRunMode property (controlled property mismatch)...")
        with _step("loading extension config: rewriting Configuration.xml"):
            strip_default_run_mode(cfg_path)
        err = load()

    if err is not None and _COMPAT_MODE in str(err).lower():
        print("Retrying with compatibility mode 8.3.10...")
        with _step("loading extension config: patch compat mode"):
            patch_extension_xml(cfg_path, "Version8_3_10", "")
        err = load()
        if err is not None and _COMPAT_MODE in str(err).lower():
            print("Retrying without compatibility mode...")
            with _step("loading extension config: patch compat mode"):
                patch_extension_xml(cfg_path, "DontUse", "")
            err = load()

    if err is not None and _INHERITED_OVERRIDE in str(err).lower():
        print("Retrying without inherited properties (old compat mode)...")
        with _step("loading extension config: strip inherited properties"):
            strip_inherited_properties(cfg_path)
        err = load()
        if err is None:
            _print_role_note()

    if err is not None:
        raise InstallError(f"loading extension config: {err}") from err


def _update_database(designer: _Designer, ext_dir: Path, cfg_path: Path) -> None:
    print("Updating database...")
    try:
        designer("/UpdateDBCfg", "-Extension", EXTENSION_NAME)
        return
    except DesignerError as exc:
        if _INHERITED_OVERRIDE not in str(exc).lower():
            raise InstallError(f"updating database config: {exc}") from exc

    print("Retrying without inherited properties (old compat mode)...")
    with _step("updating database config: strip inherited properties"):
        strip_inherited_properties(cfg_path)
    try:
        designer("/LoadConfigFromFiles", str(ext_dir), "-Extension", EXTENSION_NAME)
    except DesignerError as exc:
        raise InstallError(f"reloading extension config after strip: {exc}") from exc
    try:
        designer("/UpdateDBCfg", "-Extension", EXTENSION_NAME)
    except DesignerError as exc:
        raise InstallError(f"updating database config: {exc}") from exc
    _print_role_note()


def install(source_dir: str | os.PathLike[str], db_path: str, server_mode: bool = False,
            platform_exe: str = "", db_user: str = "", db_password: str = "",
            platform_version: str = "") -> None:
    """Load the extension sources in ``source_dir`` into the infobase at ``db_path``.

    The platform is auto-detected when ``platform_exe`` is empty; ``platform_version``
    overrides the version read from its path. ``server_mode`` selects a
    client-server infobase.
    """
    if not platform_exe:
        try:
            platform_exe = find_platform()
        except InstallError as exc:
            raise InstallError(f"finding 1C platform: {exc}") from exc
    print(f"Platform: {platform_exe}")

    designer = functools.partial(
        run_designer, platform_exe, db_path, server_mode, db_user, db_password
    )
    with tempfile.TemporaryDirectory(prefix="mcp-1c-ext-") as tmp:
        ext_dir = Path(tmp)
        with _step("extracting extension sources"):
            extract_tree(source_dir, ext_dir)
        with _step("patching format version"):
            patch_format_version(ext_dir, format_version_for_platform(platform_exe))

        cfg_path = ext_dir / "Configuration.xml"
        major, minor = parse_platform_version(platform_exe, platform_version)
        _prepatch(ext_dir, cfg_path, major, minor)
        _load_extension(designer, ext_dir, cfg_path)
        _update_database(designer, ext_dir, cfg_path)