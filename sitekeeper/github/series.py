"""
series.py — Ejecuta operaciones en serie con corte al primer error.

Cada paso es una operación con nombre que se puede invocar por
separado. run_series() las compone: el paso N solo empieza cuando
el paso N-1 terminó bien; si uno falla, los siguientes no corren
y la excepción llega intacta a quien llamó.

Uso:
    from sitekeeper.github.series import Step, run_series
    run_series([
        Step("create-branch", workflow.create_draft_branch),
        Step("commit", lambda: workflow.commit(opts)),
    ])
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Sequence

from sitekeeper.utils.logger import get_logger

logger = get_logger("sitekeeper.series")


@dataclass(frozen=True)
class Step:
    """Un paso de la serie: nombre (para logs) + callable sin argumentos."""
    name: str
    run: Callable[[], Any]


def run_series(steps: Sequence[Step], label: str = "serie") -> list[Any]:
    """
    Ejecuta los pasos en orden.

    Args:
        steps: Pasos a ejecutar.
        label: Nombre de la serie para los logs.

    Returns:
        Resultados de cada paso, en orden.

    Raises:
        La excepción del primer paso que falle.
    """
    resultados: list[Any] = []
    total = len(steps)

    for numero, step in enumerate(steps, start=1):
        logger.step(numero, total, f"{label}: {step.name}")
        try:
            resultados.append(step.run())
        except Exception as e:
            logger.error(f"{label} abortada en '{step.name}': {e}")
            raise

    return resultados
