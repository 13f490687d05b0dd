"""
Milestone Tracker

Usage:
    from strokecode.core.milestones import MilestoneTracker, Milestone

    tracker = MilestoneTracker.start()
    tracker.record(Milestone.FIRST_IMAGE, ct_time)
    tracker.minutes_from_anchor(Milestone.FIRST_IMAGE)
"""
from .tracker import (
    Badge,
    DataQualityWarning,
    Milestone,
    MilestoneReading,
    MilestoneTarget,
    MilestoneTracker,
    MILESTONE_LABELS,
    MILESTONE_TARGETS,
    PROCEDURAL_MILESTONES,
    minutes_between,
    parse_milestone,
    round_minutes,
)

__all__ = [
    "Badge",
    "DataQualityWarning",
    "Milestone",
    "MilestoneReading",
    "MilestoneTarget",
    "MilestoneTracker",
    "MILESTONE_LABELS",
    "MILESTONE_TARGETS",
    "PROCEDURAL_MILESTONES",
    "minutes_between",
    "parse_milestone",
    "round_minutes",
]
