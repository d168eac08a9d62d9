"""
Serialisation schemas for ghstat output.
"""

from ghstat.schemas.role import RoleSummary

__all__ = ["RoleSummary"]
