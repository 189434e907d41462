"""
Exceptions shared across the renderer.
"""


class ConfigurationError(ValueError):
    """Invalid render, camera, surface or material parameters.

    Raised at construction time so a bad configuration aborts before
    any pixel is computed.
    """
    pass
