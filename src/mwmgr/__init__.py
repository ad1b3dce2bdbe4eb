"""
MW_MGR

Editorial workflow backend for the MatteiWeekly school newsletter.
"""
from .config import Config

__version__ = Config.VERSION
