"""알람"""

from stock_bot.alerts.alarm import AlarmBook, crossed_targets
from stock_bot.alerts.volume_spike import VolumeSpike, VolumeSpikeDetector

__all__ = [
    "AlarmBook",
    "crossed_targets",
    "VolumeSpike",
    "VolumeSpikeDetector",
]
