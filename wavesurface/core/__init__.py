"""Core wave rendering for wavesurface.

Modules:
- waves: wave parameters + per-frame layer geometry
- surface: drawing surface / host interfaces, headless host
- renderer: per-frame compositing and playback state
- mask_loader: background mask rasterization
"""
