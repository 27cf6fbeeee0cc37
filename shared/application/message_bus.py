"""
Message Bus

Routes commands to their single handler and domain events to any number
of subscribers.
"""

from typing import Any, Callable, Dict, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class MessageBus:
    """
    Message bus for commands and events

    Commands: One handler per command (1:1); errors propagate to the caller
    Events: Multiple handlers per event (1:N); errors are logged and isolated
    """

    def __init__(self):
        self._event_handlers: Dict[Type[DomainEvent], List[Callable]] = {}
        self._command_handlers: Dict[Type, Callable] = {}

    def register_event_handler(
        self,
        event_type: Type[DomainEvent],
        handler: Callable[[DomainEvent], None]
    ):
        handlers = self._event_handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug(f"Registered event handler {_name(handler)} for {event_type.__name__}")

    def register_command_handler(
        self,
        command_type: Type,
        handler: Callable[[Any], Any]
    ):
        if command_type in self._command_handlers:
            raise ValueError(
                f"Handler for {command_type.__name__} is already registered. "
                "Commands can have only one handler."
            )
        self._command_handlers[command_type] = handler
        logger.debug(f"Registered command handler for {command_type.__name__}")

    def has_command_handler(self, command_type: Type) -> bool:
        return command_type in self._command_handlers

    def handle_command(self, command: Any) -> Any:
        """
        Dispatch a command to its handler and return the handler's result

        Raises LookupError if nothing is registered for the command type.
        """
        command_type = type(command)
        handler = self._command_handlers.get(command_type)

        if not handler:
            raise LookupError(f"No handler registered for command {command_type.__name__}")

        logger.info(f"Handling command: {command_type.__name__}")
        try:
            return handler(command)
        except Exception as e:
            logger.info(f"Command {command_type.__name__} failed: {e.__class__.__name__}: {e}")
            raise

    def publish_events(self, events: List[DomainEvent]):
        """
        Publish domain events to every subscriber

        A failing subscriber is logged and does not stop the others.
        """
        for event in events:
            handlers = self._event_handlers.get(type(event), [])

            if not handlers:
                logger.debug(f"No handlers registered for event {event.event_type}")
                continue

            logger.info(f"Publishing event: {event.event_type} (ID: {event.event_id})")

            for handler in handlers:
                try:
                    handler(event)
                except Exception as e:
                    logger.error(
                        f"Error in event handler {_name(handler)} "
                        f"for event {event.event_type}: {e}",
                        exc_info=True
                    )

    def reset(self):
        """Drop every registration"""
        self._event_handlers.clear()
        self._command_handlers.clear()


def _name(handler: Callable) -> str:
    return getattr(handler, '__qualname__', None) or handler.__class__.__name__


# Global message bus instance, wired in BookingsConfig.ready()
message_bus = MessageBus()
