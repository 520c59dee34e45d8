from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class MilestoneDefinition:
    """
    A named construction milestone.

    Exactly one trigger style applies: ``manual`` reads the lot's manual flags,
    ``trigger_tasks`` requires every named task complete, ``trigger_task``
    requires the single named task complete.
    """

    id: str
    label: str
    percent: int
    trigger_task: Optional[str] = None
    trigger_tasks: tuple[str, ...] = ()
    manual: bool = False
    short: str = ""


DEFAULT_MILESTONES: tuple[MilestoneDefinition, ...] = (
    MilestoneDefinition("permit_issued", "Permit Issued", 0, manual=True, short="PER"),
    MilestoneDefinition("foundation_complete", "Foundation Complete", 8, trigger_task="Slab Grade", short="FND"),
    MilestoneDefinition("framing_complete", "Framing Complete", 20, trigger_task="Framing", short="FRM"),
    MilestoneDefinition("dried_in", "Dried-In", 27, trigger_task="Roofing", short="DRY"),
    MilestoneDefinition(
        "rough_complete",
        "Rough Complete",
        45,
        trigger_tasks=("Rough Electrical", "Rough Plumbing", "Rough HVAC"),
        short="RGH",
    ),
    MilestoneDefinition("drywall_complete", "Drywall Complete", 55, trigger_task="Drywall Hang", short="DRW"),
    MilestoneDefinition(
        "trim_complete",
        "Trim Complete",
        75,
        trigger_task="Final Trim Install / Countertop Install",
        short="TRM",
    ),
    MilestoneDefinition("final_inspection", "Final Inspection", 95, trigger_task="Final Inspection", short="FIN"),
    MilestoneDefinition("co", "Certificate of Occupancy", 98, manual=True, short="CO"),
    MilestoneDefinition("complete", "Complete", 100, trigger_task="Punch Complete", short="CMP"),
)


__all__ = ["MilestoneDefinition", "DEFAULT_MILESTONES"]
