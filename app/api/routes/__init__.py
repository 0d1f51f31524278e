"""
API Routes Package
"""
from . import (
    health,
    workflows,
    catalog,
    publish,
)
