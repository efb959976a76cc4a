"""
Connection status tracking for display sessions.

The display's WebSocket lifecycle is tracked separately from the
controller mode: a display can be OFFLINE (showing the fallback page)
while its control connection is perfectly UP.

This is pure data owned by DisplayGateway, not by session state.
"""
from enum import Enum

class ConnectionStatus(Enum):
    """
    Control connection status of a display client.

    Independent of the controller Mode enum.
    """
    DOWN = "DOWN"   # Display detached (or never attached)
    UP = "UP"       # Display WebSocket accepted
