"""
Lead routes package.

- public.py: lead capture from campaign landing pages
- admin.py: listing, editing and assignment of leads
- disposition.py: call outcomes and their history
- agent.py: leads keyed in by agents on their campaigns
"""

from flask import Blueprint

lead_bp = Blueprint('lead', __name__)

from . import public
from . import admin
from . import disposition
from . import agent

__all__ = ['lead_bp']
