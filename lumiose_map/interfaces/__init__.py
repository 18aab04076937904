"""
Interfaces module - presentation adapters for the map core.

Provides adapters to connect the core editing logic
with different rendering substrates (canvas, web map, etc).
"""

from .surface_adapter import LiveHandle, RenderSurface, SurfaceAdapter

__all__ = ['LiveHandle', 'RenderSurface', 'SurfaceAdapter']
