"""Shared `oc` execution helpers."""

import json
import shlex
import subprocess
from tempfile import TemporaryFile
from typing import Any, cast

DEFAULT_BINARY = "oc"
_CHUNK_SIZE = 1024 * 1024


class OcError(RuntimeError):
    """Raised when an `oc` command fails."""


def _build_args(command: str | list[str], binary: str) -> list[str]:
    parts = shlex.split(command) if isinstance(command, str) else list(command)
    return [binary, *parts]


def _run_oc(
    command: str | list[str],
    *,
    append_json_output: bool,
    binary: str = DEFAULT_BINARY,
) -> subprocess.CompletedProcess[str]:
    args = _build_args(command, binary)
    if append_json_output:
        args.extend(["-o", "json"])
    try:
        return subprocess.run(
            args,
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as exc:
        raise OcError(f"`{binary}` executable not found on PATH") from exc
    except subprocess.CalledProcessError as exc:
        stderr = exc.stderr.strip() if exc.stderr else str(exc)
        raise OcError(f"{binary} command failed: {stderr}") from exc


def oc_json(
    command: str | list[str],
    *,
    append_json_output: bool = True,
    binary: str = DEFAULT_BINARY,
) -> dict[str, Any]:
    """Execute `oc` command and parse JSON output."""
    result = _run_oc(command, append_json_output=append_json_output, binary=binary)
    try:
        return cast(dict[str, Any], json.loads(result.stdout) if result.stdout else {})
    except json.JSONDecodeError as exc:
        raise OcError(f"{binary} returned invalid JSON: {exc}") from exc


def oc_text(command: str | list[str], *, binary: str = DEFAULT_BINARY) -> str:
    """Execute `oc` command and return text output."""
    result = _run_oc(command, append_json_output=False, binary=binary)
    return result.stdout


def oc_succeeds(command: str | list[str], *, binary: str = DEFAULT_BINARY) -> bool:
    """Return whether `oc` command exits successfully."""
    try:
        _run_oc(command, append_json_output=False, binary=binary)
    except OcError:
        return False
    return True


def oc_output_size(command: str | list[str], *, binary: str = DEFAULT_BINARY) -> int:
    """Execute `oc` command and return the byte length of its output.

    Stdout is read in chunks and never held in memory as a whole, so this
    is safe for all-namespaces dumps of large collections.
    """
    args = _build_args(command, binary)
    size = 0
    try:
        with (
            TemporaryFile() as stderr,
            subprocess.Popen(args, stdout=subprocess.PIPE, stderr=stderr) as proc,
        ):
            stdout = cast(Any, proc.stdout)
            while True:
                chunk = stdout.read(_CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
            returncode = proc.wait()
            stderr.seek(0)
            message = stderr.read().decode("utf-8", errors="replace").strip()
    except FileNotFoundError as exc:
        raise OcError(f"`{binary}` executable not found on PATH") from exc
    if returncode != 0:
        raise OcError(
            f"{binary} command failed: {message or f'exit status {returncode}'}"
        )
    return size
