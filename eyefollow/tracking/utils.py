"""
Face Tracking Utility Functions
Pixel-to-gaze normalisation and quaternion math
"""

import math
from typing import Tuple

import numpy as np


def normalize_position(region, frame_width: int, frame_height: int) -> Tuple[float, float]:
    """
    Map a region's centre to resolution-independent gaze coordinates.

    Image rows grow downwards while gaze +1 means "up", so the vertical
    axis is flipped.

    Args:
        region:       DetectedRegion (anything with a pixel centre).
        frame_width:  Frame width in pixels.
        frame_height: Frame height in pixels.

    Returns:
        (nx, ny), each in [-1, 1]. Centre of frame is (0, 0), top-left is (-1, 1).
    """
    center_x, center_y = region.center

    nx = (center_x / frame_width) * 2 - 1
    ny = -((center_y / frame_height) * 2 - 1)

    return float(np.clip(nx, -1.0, 1.0)), float(np.clip(ny, -1.0, 1.0))


def normalize(v: np.ndarray) -> np.ndarray:
    """
    Normalize a vector

    Args:
        v: Vector to normalize

    Returns:
        Normalized vector (or original if norm too small)
    """
    v = np.asarray(v, dtype=float)
    n = np.linalg.norm(v)
    return v / n if n > 1e-9 else v


# Quaternions are numpy arrays ordered (w, x, y, z)

IDENTITY = np.array([1.0, 0.0, 0.0, 0.0])


def quat_from_axis_angle(axis, angle: float) -> np.ndarray:
    """Unit quaternion rotating by angle (radians) about axis"""
    axis = normalize(axis)
    half = angle / 2.0
    return np.concatenate(([math.cos(half)], math.sin(half) * axis))


def quat_multiply(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Hamilton product a * b (apply b first, then a)"""
    aw, ax, ay, az = a
    bw, bx, by, bz = b
    return np.array([
        aw * bw - ax * bx - ay * by - az * bz,
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
    ])


def quat_from_yaw_pitch(yaw: float, pitch: float) -> np.ndarray:
    """Rotation Ry(yaw) * Rz(pitch): pitch about the eye's Z, then yaw about world Y"""
    q_yaw = quat_from_axis_angle((0.0, 1.0, 0.0), yaw)
    q_pitch = quat_from_axis_angle((0.0, 0.0, 1.0), pitch)
    return quat_multiply(q_yaw, q_pitch)


def quat_to_matrix(q: np.ndarray) -> np.ndarray:
    """
    Convert a unit quaternion to a rotation matrix

    Args:
        q: (w, x, y, z) quaternion

    Returns:
        3x3 rotation matrix
    """
    w, x, y, z = normalize(q)
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y)],
        [2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x)],
        [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y)],
    ], dtype=float)


def yaw_pitch_from_quat(q: np.ndarray) -> Tuple[float, float]:
    """
    Recover (yaw, pitch) from a rotation built as Ry(yaw) * Rz(pitch).

    For R = Ry(a) Rz(b): R[1,0] = sin b, R[0,0] = cos a cos b, R[2,0] = -sin a cos b.
    """
    R = quat_to_matrix(q)
    pitch = math.asin(float(np.clip(R[1, 0], -1.0, 1.0)))
    yaw = math.atan2(-R[2, 0], R[0, 0])
    return yaw, pitch


def slerp(q0: np.ndarray, q1: np.ndarray, t: float) -> np.ndarray:
    """
    Spherical linear interpolation along the shortest arc.

    Args:
        q0: Start quaternion
        q1: End quaternion
        t:  Fraction of the way from q0 to q1, 0..1

    Returns:
        Unit quaternion
    """
    q0 = normalize(q0)
    q1 = normalize(q1)

    dot = float(np.dot(q0, q1))
    if dot < 0.0:
        q1 = -q1
        dot = -dot

    # Nearly parallel: sin(theta) ~ 0, fall back to normalised lerp
    if dot > 0.9995:
        return normalize(q0 + t * (q1 - q0))

    theta_0 = math.acos(dot)
    theta = theta_0 * t
    sin_0 = math.sin(theta_0)
    s0 = math.cos(theta) - dot * math.sin(theta) / sin_0
    s1 = math.sin(theta) / sin_0
    return normalize(s0 * q0 + s1 * q1)
