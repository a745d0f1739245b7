"""DSP modules for LoudnessQC."""

from loudnessqc.dsp.kweighting import (
    BS1770_48K_SOS,
    KWeightingFilterBank,
    k_weighting_sos,
)

__all__ = [
    "BS1770_48K_SOS",
    "KWeightingFilterBank",
    "k_weighting_sos",
]
