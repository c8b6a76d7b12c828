"""External desktop commands: theme switch, portal reload, wallpaper daemon, hooks."""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Sequence
from pathlib import Path

from themeforge.errors import ErrorCode, ExternalCommandError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_THEME_SWITCH_COMMAND = "omarchy-theme-set"
FALLBACK_THEME = "tokyo-night"
PORTAL_PROCESS = "xdg-desktop-portal-gtk"


class CommandRunner:
    """Runs external programs with explicit timeouts.

    ``sync`` calls block until the program exits and raise
    ExternalCommandError on a missing binary, a non-zero exit or a timeout.
    Async calls start the program detached and return immediately.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout

    def which(self, program: str) -> str | None:
        return shutil.which(program)

    def run(
        self,
        args: Sequence[str],
        sync: bool = True,
        timeout: float | None = None,
        cwd: str | Path | None = None,
    ) -> int | None:
        """Run ``args``. Returns the exit code for sync calls, None for async ones."""
        command = " ".join(args)
        if not args or (self.which(args[0]) is None and not Path(args[0]).is_file()):
            raise ExternalCommandError(
                ErrorCode.COMMAND_MISSING,
                message=f"Command not found: {args[0] if args else ''}",
                command=command,
            )

        if not sync:
            logger.debug("starting %s", command)
            try:
                subprocess.Popen(
                    list(args),
                    cwd=cwd,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    start_new_session=True,
                )
            except OSError as exc:
                raise ExternalCommandError(command=command, details={"original": str(exc)}) from exc
            return None

        limit = self.timeout if timeout is None else timeout
        logger.debug("running %s (timeout %.0fs)", command, limit)
        try:
            completed = subprocess.run(
                list(args),
                cwd=cwd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                timeout=limit,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise ExternalCommandError(
                ErrorCode.COMMAND_TIMEOUT,
                message=f"{args[0]} did not finish within {limit:.0f}s",
                command=command,
            ) from exc
        except OSError as exc:
            raise ExternalCommandError(command=command, details={"original": str(exc)}) from exc

        if completed.returncode != 0:
            raise ExternalCommandError(
                message=f"{args[0]} exited with status {completed.returncode}",
                command=command,
                details={"stderr": (completed.stderr or "").strip()[:500]},
            )
        return completed.returncode


class DesktopSession:
    """The desktop commands themeforge drives, on top of a CommandRunner."""

    def __init__(
        self,
        runner: CommandRunner | None = None,
        theme_switch_command: str = DEFAULT_THEME_SWITCH_COMMAND,
    ) -> None:
        self.runner = runner or CommandRunner()
        self.theme_switch_command = (theme_switch_command or "").strip() or DEFAULT_THEME_SWITCH_COMMAND

    def switch_theme(self, theme_name: str, sync: bool = False) -> None:
        self.runner.run([self.theme_switch_command, theme_name], sync=sync)
        logger.info("switched desktop theme to %s", theme_name)

    def reload_portal(self, sync: bool = False) -> None:
        """Restart the GTK desktop portal so it picks up new colors. Absence is not an error."""
        try:
            self.runner.run(["killall", PORTAL_PROCESS], sync=sync)
        except ExternalCommandError as exc:
            logger.debug("portal not restarted: %s", exc.message)

    def restart_wallpaper(self, background_link: str | Path) -> None:
        """Restart swaybg on the given background, fire-and-forget."""
        try:
            self.runner.run(["pkill", "-x", "swaybg"], sync=True, timeout=5)
        except ExternalCommandError as exc:
            logger.debug("no swaybg to stop: %s", exc.message)
        self.runner.run(
            ["setsid", "uwsm-app", "--", "swaybg", "-i", str(background_link), "-m", "fill"],
            sync=False,
        )

    def run_hook(self, script: str | Path, timeout: float | None = None) -> None:
        script_path = Path(script)
        self.runner.run(["bash", str(script_path)], sync=True, timeout=timeout, cwd=script_path.parent)
