# =============================================================================
# File:       schemadb/managers/event_manager.py
# Purpose:    API layer over EventHandler (store and record events)
# Created:    2025-08-07
# Updated:    2025-08-19
# =============================================================================

from schemadb.handlers.event_handler import EventHandler

# Events emitted by the package
STORE_LOADED = "store_loaded"
STORE_CLOSED = "store_closed"
RECORD_CREATED = "record_created"
RECORD_UPDATED = "record_updated"
RECORD_DESTROYED = "record_destroyed"
MODEL_DROPPED = "model_dropped"


class EventManager:
    @staticmethod
    def initialize():
        EventHandler.clear_all()

    @staticmethod
    def on(event_name: str, callback: callable):
        EventHandler.register(event_name, callback)

    @staticmethod
    def off(event_name: str = None, callback: callable = None):
        """Removes every event, every listener of an event, or one listener."""
        if event_name is None:
            EventHandler.clear_all()
        elif callback is None:
            EventHandler.clear_event(event_name)
        else:
            EventHandler.remove_listener(event_name, callback)

    @staticmethod
    def read(event_name: str = None):
        return EventHandler.get_listeners(event_name)

    @staticmethod
    def emit(event_name: str, data=None):
        EventHandler.emit(event_name, data)
