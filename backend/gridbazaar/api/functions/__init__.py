"""
Serverless-style function handlers.
"""
from gridbazaar.api.functions.router import functions_router

__all__ = ["functions_router"]
