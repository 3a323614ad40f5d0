"""Последовательный запуск шагов очистки без проверки их результата."""

from __future__ import annotations

import logging
import re
import shlex
import subprocess
import sys
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, TextIO

from reclaimer.reclaim.steps import ReclaimStep
from reclaimer.utils.system_metrics import format_bytes

LOGGER = logging.getLogger(__name__)

Runner = Callable[..., "subprocess.CompletedProcess[str]"]

# коды возврата оболочки для "команда не найдена" и "истёк таймаут"
EXIT_NOT_STARTED = 127
EXIT_TIMED_OUT = 124

_RECLAIMED_PATTERN = re.compile(
    r"Total reclaimed space:\s*([\d.]+)\s*([kKMGTP]?B)",
)
# docker CLI печатает размеры в десятичных единицах
_UNIT_FACTORS = {
    "B": 1,
    "KB": 1000,
    "MB": 1000**2,
    "GB": 1000**3,
    "TB": 1000**4,
    "PB": 1000**5,
}


@dataclass(slots=True)
class StepResult:
    """Итог одного шага."""

    step: ReclaimStep
    return_code: Optional[int]
    output: str = ""
    error_message: Optional[str] = None
    reclaimed_bytes: int = 0
    timed_out: bool = False

    @property
    def succeeded(self) -> bool:
        return self.return_code == 0

    @property
    def status_code(self) -> int:
        if self.return_code is not None:
            return self.return_code
        return EXIT_TIMED_OUT if self.timed_out else EXIT_NOT_STARTED


@dataclass(slots=True)
class ReclaimReport:
    """Результаты всех шагов в порядке запуска."""

    results: List[StepResult] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        """Код последнего шага, как у shell-скрипта без ``set -e``."""

        if not self.results:
            return 0
        return self.results[-1].status_code

    @property
    def failed_steps(self) -> List[str]:
        return [result.step.name for result in self.results if not result.succeeded]

    @property
    def reclaimed_bytes(self) -> int:
        return sum(result.reclaimed_bytes for result in self.results)


def parse_reclaimed_space(text: str) -> int:
    """Суммирует строки ``Total reclaimed space: 1.2GB`` из вывода docker в байты."""

    total = 0.0
    for value, unit in _RECLAIMED_PATTERN.findall(text):
        try:
            amount = float(value)
        except ValueError:
            continue
        total += amount * _UNIT_FACTORS[unit.upper()]
    return int(round(total))


def run_step(
    step: ReclaimStep,
    *,
    stream: TextIO,
    runner: Runner = subprocess.run,
    timeout: Optional[float] = None,
) -> StepResult:
    """Печатает объявление шага и выполняет его команду.

    Скрытые шаги запускаются с перехваченными stdout и stderr: их вывод
    попадает только в лог. У показываемого шага stdout переносится в stream.
    Ошибки запуска и таймауты записываются в результат, исключение наружу
    не выходит.
    """

    stream.write(f"{step.announcement}\n")
    stream.flush()

    command = list(step.command)
    LOGGER.info("Running step %s: %s", step.name, shlex.join(command))
    try:
        completed = runner(
            command,
            stdout=subprocess.PIPE,
            stderr=None if step.show_output else subprocess.STDOUT,
            # имена точек монтирования и томов не обязаны быть в UTF-8
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        LOGGER.warning("Step %s timed out after %s seconds", step.name, timeout)
        return StepResult(
            step=step,
            return_code=None,
            error_message=f"Timed out after {timeout} seconds",
            timed_out=True,
        )
    except OSError as exc:
        LOGGER.warning("Step %s could not be started: %s", step.name, exc)
        return StepResult(step=step, return_code=None, error_message=str(exc))

    output = completed.stdout or ""
    if step.show_output:
        stream.write(output)
        stream.flush()
        result = StepResult(step=step, return_code=completed.returncode)
    else:
        if output.strip():
            LOGGER.debug("Output of %s:\n%s", step.name, output.rstrip())
        result = StepResult(
            step=step,
            return_code=completed.returncode,
            output=output,
            reclaimed_bytes=parse_reclaimed_space(output),
        )

    if result.succeeded:
        LOGGER.info(
            "Step %s finished, reclaimed %s", step.name, format_bytes(result.reclaimed_bytes)
        )
    else:
        result.error_message = f"Process exited with code {completed.returncode}"
        LOGGER.warning("Step %s exited with code %s", step.name, completed.returncode)
    return result


def run_reclaim(
    steps: Iterable[ReclaimStep],
    *,
    stream: Optional[TextIO] = None,
    runner: Runner = subprocess.run,
    timeout: Optional[float] = None,
) -> ReclaimReport:
    """Выполняет все шаги по порядку независимо от исхода предыдущих."""

    target = stream or sys.stdout
    report = ReclaimReport()
    for step in steps:
        report.results.append(run_step(step, stream=target, runner=runner, timeout=timeout))
    if report.failed_steps:
        LOGGER.warning("Steps finished with errors: %s", ", ".join(report.failed_steps))
    LOGGER.info("Total reclaimed space: %s", format_bytes(report.reclaimed_bytes))
    return report
