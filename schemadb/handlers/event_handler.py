# =============================================================================
# File:       schemadb/handlers/event_handler.py
# Purpose:    Low level registry for events and their listeners
# Created:    2025-08-07
# Updated:    2025-08-19
# =============================================================================

from typing import Callable, Dict, List

from schemadb.managers.log_manager import LogManager


class EventHandler:
    _listeners: Dict[str, List[Callable]] = {}

    @staticmethod
    def register(event_name: str, callback: Callable):
        EventHandler._listeners.setdefault(event_name, []).append(callback)

    @staticmethod
    def emit(event_name: str, data=None):
        """Runs every callback registered for the event; a failing listener is logged."""
        for callback in list(EventHandler._listeners.get(event_name, [])):
            try:
                callback(data)
            except Exception as e:
                LogManager.error(f"[EventHandler] listener for '{event_name}' failed: {e}")

    @staticmethod
    def clear_all():
        EventHandler._listeners.clear()

    @staticmethod
    def clear_event(event_name: str):
        EventHandler._listeners.pop(event_name, None)

    @staticmethod
    def remove_listener(event_name: str, callback: Callable) -> bool:
        listeners = EventHandler._listeners.get(event_name, [])
        if callback in listeners:
            listeners.remove(callback)
            return True
        return False

    @staticmethod
    def get_listeners(event_name: str = None):
        if event_name:
            return EventHandler._listeners.get(event_name, [])
        return EventHandler._listeners
