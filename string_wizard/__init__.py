"""
StringWizard service.

Echo and Length operations dispatched through a routing table derived from the
service's interface definition.
"""

__version__ = "1.0.0"
