"""
eyefollow
An eye model that follows the face seen by a webcam

Modules:
- tracking: Camera capture, face detection, shared gaze state and smoothing
- pipeline: Lifecycle owner for the tracking components
- viewer:   Pygame and headless render hosts
"""

from .pipeline import TrackingPipeline
from .tracking import TrackingConfig

__all__ = [
    'TrackingPipeline',
    'TrackingConfig',
]

__version__ = '1.0.0'
