from typing import List, Optional

from models import Preset

PRESETS: List[Preset] = [
    Preset(
        id="box-breathing",
        name="Box Breathing",
        description="Equal 4-count breathing pattern used by military and first responders for stress relief and focus.",
        type="breathing",
        duration=10,
        technique="box",
        benefits=["Stress Relief", "Focus", "Calm"],
    ),
    Preset(
        id="4-7-8-breathing",
        name="4-7-8 Breathing",
        description="A calming breath pattern for anxiety relief and better sleep.",
        type="breathing",
        duration=8,
        technique="4-7-8",
        benefits=["Sleep", "Anxiety Relief", "Relaxation"],
    ),
    Preset(
        id="body-scan",
        name="Body Scan",
        description="Progressive awareness meditation moving through each part of your body systematically.",
        type="meditation",
        duration=20,
        technique="body-scan",
        benefits=["Body Awareness", "Relaxation", "Stress Relief"],
    ),
    Preset(
        id="loving-kindness",
        name="Loving-Kindness",
        description="Cultivate compassion and positive emotions toward yourself and others.",
        type="meditation",
        duration=15,
        technique="loving-kindness",
        benefits=["Compassion", "Positivity", "Relationships"],
    ),
    Preset(
        id="mindfulness",
        name="Mindfulness",
        description="Present moment awareness meditation focusing on breath and observing thoughts.",
        type="meditation",
        duration=15,
        technique="mindfulness",
        benefits=["Awareness", "Focus", "Emotional Regulation"],
    ),
]


def list_presets(preset_type: Optional[str] = None) -> List[Preset]:
    if preset_type is None:
        return list(PRESETS)
    return [p for p in PRESETS if p.type == preset_type]


def get_preset(preset_id: str) -> Optional[Preset]:
    return next((p for p in PRESETS if p.id == preset_id), None)
