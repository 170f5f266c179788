"""
Emulated devices — the labels Lighthouse is run with and their stored ids.
"""
from typing import List

DESKTOP = 'desktop'
MOBILE = 'mobile'
BOTH = 'both'

_DEVICE_IDS = {
    DESKTOP: 1,
    MOBILE: 2,
}


def get_list(setting: str) -> List[str]:
    """Expand a site's emulated_device setting into device labels."""
    if setting == BOTH:
        return [DESKTOP, MOBILE]
    if setting in _DEVICE_IDS:
        return [setting]
    raise ValueError(f"Unknown emulated device setting '{setting}'. "
                     f"Available: {[DESKTOP, MOBILE, BOTH]}")


def get_id_for(device: str) -> int:
    """Stable numeric id stored in log_performance.emulated_device."""
    try:
        return _DEVICE_IDS[device]
    except KeyError:
        raise ValueError(f"Unknown emulated device '{device}'") from None
