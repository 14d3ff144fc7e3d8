"""
Camera matrices (perspective projection and look-at view).

All matrices are row-major numpy arrays; GraphicsResourceManager transposes
them on upload.
"""

import numpy as np

NEAR_PLANE = 0.1
FAR_PLANE_MARGIN = 10.0


def perspective(fov_deg: float, aspect: float, near: float, far: float) -> np.ndarray:
    """OpenGL-style perspective projection (right-handed, clip z in [-1, 1])."""
    f = 1.0 / np.tan(np.radians(fov_deg) / 2.0)
    m = np.zeros((4, 4), dtype=np.float32)
    m[0, 0] = f / aspect
    m[1, 1] = f
    m[2, 2] = (far + near) / (near - far)
    m[2, 3] = 2.0 * far * near / (near - far)
    m[3, 2] = -1.0
    return m


def look_at(eye, target, up) -> np.ndarray:
    """View matrix placing the camera at eye, looking at target."""
    eye, target, up = [np.asarray(v, dtype=np.float32) for v in (eye, target, up)]
    f = target - eye
    f /= np.linalg.norm(f)
    s = np.cross(f, up)
    s /= np.linalg.norm(s)
    u = np.cross(s, f)
    m = np.eye(4, dtype=np.float32)
    m[0, :3] = s
    m[1, :3] = u
    m[2, :3] = -f
    m[0, 3] = -np.dot(s, eye)
    m[1, 3] = -np.dot(u, eye)
    m[2, 3] = np.dot(f, eye)
    return m


def camera_matrix(fov_deg: float, distance: float, width: int, height: int) -> np.ndarray:
    """
    Compose projection x view x model for the pendulum scene.

    The camera sits on +z at `distance` looking at the pivot with +y up; the
    far plane is `distance + 10` so the scene never clips at any zoom. The
    model matrix is the identity.

    Args:
        fov_deg: Vertical field of view in degrees
        distance: Camera distance from the origin
        width, height: Framebuffer size (aspect ratio)
    """
    aspect = width / max(height, 1)
    proj = perspective(fov_deg, aspect, NEAR_PLANE, distance + FAR_PLANE_MARGIN)
    view = look_at((0.0, 0.0, distance), (0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
    model = np.eye(4, dtype=np.float32)
    return proj @ view @ model
