"""
ghstat: hiring-pipeline statistics gathered from Greenhouse.
"""

__version__ = "0.4.0"
