"""Validators — the external check whose exit status decides a trial.

Defines the ``Validator`` Protocol the engines depend on, along with the
default ``CommandValidator`` that runs ``cargo check`` (or an operator's
override command through a shell).
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from cargobounds.config import config
from cargobounds.models.reports import TrialResult

logger = logging.getLogger(__name__)

OutputCallback = Callable[[str], None]


@runtime_checkable
class Validator(Protocol):
    """Protocol for trial validators.

    Any object with a ``validate(on_output) -> TrialResult`` method
    satisfies this protocol. Validators see the manifest only through the
    file system; they are invoked after the trial version is written.
    """

    def validate(self, on_output: OutputCallback | None = None) -> TrialResult:
        """Run the check once and return its verdict.

        Parameters
        ----------
        on_output:
            Called with each line of diagnostic output as it is produced.
        """
        ...


class CommandValidator:
    """Runs a command and maps its exit status to a ``TrialResult``.

    Exit status zero is ``SUCCESS``. A non-zero status, or a command that
    cannot be started at all, is ``FAIL``. stdout is discarded; stderr is
    streamed line by line to ``on_output`` and never interpreted.

    Parameters
    ----------
    command:
        Operator override, run as ``<shell> -c <command>``. When None the
        configured check command (``cargo check --all-features``) is used.
    cwd:
        Working directory for the command; defaults to the current one.
    """

    def __init__(
        self,
        command: str | None = None,
        *,
        cwd: Path | None = None,
        shell: str | None = None,
        default_command: Sequence[str] | None = None,
    ) -> None:
        self.command = command
        self.cwd = cwd
        self._shell = shell or config.shell
        self._default = tuple(default_command or config.check_command)

    @property
    def argv(self) -> list[str]:
        if self.command is not None:
            return [self._shell, "-c", self.command]
        return list(self._default)

    def validate(self, on_output: OutputCallback | None = None) -> TrialResult:
        argv = self.argv
        logger.debug("Running validator: %s", argv)
        try:
            process = subprocess.Popen(
                argv,
                cwd=self.cwd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except OSError as exc:
            logger.info("Validator could not be started: %s", exc)
            return TrialResult.FAIL

        assert process.stderr is not None
        try:
            with process.stderr:
                for line in process.stderr:
                    if on_output is not None:
                        on_output(line.rstrip("\n"))
            returncode = process.wait()
        except BaseException:
            # Interrupted mid-trial: the check must not outlive the run.
            process.kill()
            process.wait()
            raise

        logger.debug("Validator exited with status %d", returncode)
        return TrialResult.SUCCESS if returncode == 0 else TrialResult.FAIL
