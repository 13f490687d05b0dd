"""
Core engine: timing, dosing, eligibility, milestones, workflow, orders, reports.
"""
