"""
events.py — Bus de eventos del modelo de repositorio.

El modelo avisa a quien lo use (UI, CLI, tests) cuando termina cada
fase: carga de config, drafts, assets, commits y uploads. El bus se
pasa explícitamente al modelo; no hay singleton global.

Nombres de eventos:
    github:fetchConfig:success / github:fetchConfig:error
    github:fetchDrafts:success / github:fetchDrafts:error
    github:fetchAssets:success / github:fetchAssets:error
    github:commit:success      / github:commit:error
    github:upload:success

Uso:
    from sitekeeper.notifications.events import EventBus, Event
    bus = EventBus()
    bus.on(Event.COMMIT_SUCCESS, lambda data: print(data))
    bus.emit(Event.COMMIT_SUCCESS, {"path": "about.md"})
"""

from __future__ import annotations

from collections import defaultdict, deque
from enum import Enum
from typing import Any, Callable

from sitekeeper.utils.logger import get_logger

logger = get_logger("sitekeeper.events")

Handler = Callable[[Any], None]

HISTORY_SIZE = 100


class Event(Enum):
    """Eventos que emite SiteRepository."""
    FETCH_CONFIG_SUCCESS = "github:fetchConfig:success"
    FETCH_CONFIG_ERROR = "github:fetchConfig:error"
    FETCH_DRAFTS_SUCCESS = "github:fetchDrafts:success"
    FETCH_DRAFTS_ERROR = "github:fetchDrafts:error"
    FETCH_ASSETS_SUCCESS = "github:fetchAssets:success"
    FETCH_ASSETS_ERROR = "github:fetchAssets:error"
    COMMIT_SUCCESS = "github:commit:success"
    COMMIT_ERROR = "github:commit:error"
    UPLOAD_SUCCESS = "github:upload:success"


class EventBus:
    """
    Emisor de eventos síncrono.

    Los handlers se llaman en orden de registro. Un handler que
    lanza una excepción se loggea y no impide que corran los demás;
    los eventos nunca deben romper el flujo de publicación.
    """

    def __init__(self, history_size: int = HISTORY_SIZE) -> None:
        self._handlers: dict[Event, list[Handler]] = defaultdict(list)
        self._once: dict[Event, list[Handler]] = defaultdict(list)
        # Solo los últimos `history_size` eventos
        self.history: deque[tuple[Event, Any]] = deque(maxlen=history_size)

    def on(self, event: Event, handler: Handler) -> None:
        """Registra un handler permanente."""
        self._handlers[event].append(handler)

    def once(self, event: Event, handler: Handler) -> None:
        """Registra un handler que se quita después del primer evento."""
        self._once[event].append(handler)

    def off(self, event: Event, handler: Handler) -> None:
        """Quita un handler (permanente u once) si estaba registrado."""
        for registro in (self._handlers, self._once):
            if handler in registro[event]:
                registro[event].remove(handler)

    def emit(self, event: Event, data: Any = None) -> None:
        """Llama a todos los handlers del evento."""
        self.history.append((event, data))
        logger.debug(f"evento {event.value}")

        handlers = list(self._handlers[event])
        handlers.extend(self._once.pop(event, []))

        for handler in handlers:
            try:
                handler(data)
            except Exception as e:
                logger.error(f"Error en handler de {event.value}: {e}")

    def emitted(self, event: Event) -> bool:
        """True si el evento se emitió al menos una vez."""
        return any(e is event for e, _ in self.history)
