# AWB Stock - Version Module
# ==========================

# SemVer format: MAJOR.MINOR.PATCH
VERSION = "0.1.0"
__version_info__ = (0, 1, 0)


def get_version() -> str:
    """Return current version string."""
    return VERSION
