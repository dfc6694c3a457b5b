"""
Yoga studio course management: record-store client and terminal dashboard.
"""
