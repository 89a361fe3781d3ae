"""Timing capture for a single tool invocation.

Measures the wall-clock latency of an external process, including its
start-up cost.  Output is discarded: only the exit status and the
elapsed time matter.  Every problem with the child (missing executable,
non-zero exit, timeout) comes back as a failed ``Sample`` instead of an
exception, so callers can treat installed and missing tools alike.
"""

from __future__ import annotations

import logging
import os
import re
import signal
import subprocess
import time
from pathlib import Path
from typing import Mapping, Sequence

from cssbench.results import Sample

log = logging.getLogger("cssbench")

# Seconds to wait for a killed process group to be reaped.
_KILL_GRACE_S = 5.0

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")


# ---------------------------------------------------------------------------
# Command templates
# ---------------------------------------------------------------------------


def placeholders(template: Sequence[str]) -> set[str]:
    """Return the placeholder names used anywhere in *template*."""
    names: set[str] = set()
    for token in template:
        names.update(_PLACEHOLDER_RE.findall(token))
    return names


def render_command(template: Sequence[str], paths: Mapping[str, str | Path]) -> list[str]:
    """Substitute ``{name}`` placeholders in each argv token.

    Substitution is per token, so a path containing spaces or shell
    metacharacters stays one argument.

    Raises:
        ValueError: If a token references a name missing from *paths*.
    """

    def _sub(match: re.Match[str]) -> str:
        key = match.group(1)
        if key not in paths:
            raise ValueError(
                f"Unknown placeholder '{{{key}}}' in command. Available: {', '.join(sorted(paths))}"
            )
        return str(paths[key])

    return [_PLACEHOLDER_RE.sub(_sub, token) for token in template]


# ---------------------------------------------------------------------------
# Core timing implementation
# ---------------------------------------------------------------------------


def time_command(
    argv: Sequence[str],
    *,
    timeout_ms: int = 30_000,
    cwd: str | Path | None = None,
    env: dict[str, str] | None = None,
) -> Sample:
    """Run *argv* to completion and return its duration in milliseconds.

    Args:
        argv: Program and arguments.  Never run through a shell.
        timeout_ms: Hard deadline; the process group is killed when it
            expires.
        cwd: Working directory for the subprocess.
        env: Extra environment variables layered over ``os.environ``.

    Returns:
        A successful Sample with the elapsed time, or a failed one with
        status ``"fail"``, ``"timeout"`` or ``"error"``.
    """
    if not argv:
        log.debug("Empty command")
        return Sample.spawn_error()

    run_env = dict(os.environ)
    if env:
        run_env.update(env)

    start = time.perf_counter()
    try:
        proc = subprocess.Popen(
            list(argv),
            cwd=str(cwd) if cwd else None,
            env=run_env,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as exc:
        log.debug("Could not start %s: %s", argv[0], exc)
        return Sample.spawn_error()

    try:
        exit_code = proc.wait(timeout=timeout_ms / 1000)
    except subprocess.TimeoutExpired:
        _reap(proc)
        log.debug("%s timed out after %d ms", argv[0], timeout_ms)
        return Sample.timed_out()
    except BaseException:
        # The child runs in its own session, so Ctrl-C never reaches it.
        _reap(proc)
        raise

    elapsed_ms = (time.perf_counter() - start) * 1000

    if exit_code != 0:
        log.debug("%s exited with status %d", argv[0], exit_code)
        return Sample.failed(exit_code)
    return Sample.measured(elapsed_ms)


def _kill_process_group(pid: int) -> None:
    """Attempt to kill the entire process group on timeout."""
    try:
        os.killpg(os.getpgid(pid), signal.SIGKILL)
    except (ProcessLookupError, PermissionError, OSError):
        pass


def _reap(proc: subprocess.Popen[bytes]) -> None:
    """Kill *proc*'s process group and wait for it to exit."""
    _kill_process_group(proc.pid)
    try:
        proc.wait(timeout=_KILL_GRACE_S)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait()
