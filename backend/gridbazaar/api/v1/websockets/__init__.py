"""
WebSocket endpoints.
"""
from gridbazaar.api.v1.websockets.realtime_stream import router as realtime_stream_router

__all__ = ["realtime_stream_router"]
