"""
Inclusion flags shared by the preset generators.
"""

import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from ..config import get_config_value
from ..recipe.ranges import clamp, clean_text, is_number

logger = logging.getLogger(__name__)

DEFAULT_GROUP = 'PhotoRecipe'

# camelCase keys used by desktop-app payloads
_CAMEL_KEYS = {
    'wbBasic': 'wb_basic',
    'basic': 'wb_basic',
    'colorGrading': 'color_grading',
    'pointColor': 'point_color',
    'groupName': 'group_name',
}


@dataclass(frozen=True)
class ExportOptions:
    """Which adjustment groups a generator emits, and how strongly."""
    wb_basic: bool = True
    exposure: bool = False
    hsl: bool = True
    color_grading: bool = True
    curves: bool = True
    point_color: bool = True
    grain: bool = True
    vignette: bool = True
    masks: bool = False
    strength: float = 1.0  # 0..2 multiplier for scalable sliders
    group_name: str = DEFAULT_GROUP

    def __post_init__(self):
        strength = self.strength if is_number(self.strength) else 1.0
        object.__setattr__(self, 'strength', clamp(float(strength), 0.0, 2.0))
        group_name = clean_text(self.group_name)
        object.__setattr__(self, 'group_name', group_name if group_name and group_name.strip() else DEFAULT_GROUP)

    def scale(self, value: Optional[float]) -> Optional[float]:
        """Apply strength to a slider value, keeping absent values absent."""
        if value is None:
            return None
        return value * self.strength

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ExportOptions':
        """
        Build options from snake_case or camelCase keys.

        Args:
            data: Mapping such as {'wbBasic': True, 'masks': True, 'strength': 0.8}

        Returns:
            ExportOptions with unspecified flags at their defaults
        """
        names = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in (data or {}).items():
            name = _CAMEL_KEYS.get(key, key)
            if name not in names:
                logger.debug(f"Ignoring unknown export option '{key}'")
                continue
            if name in ('strength', 'group_name'):
                kwargs[name] = value
            else:
                kwargs[name] = bool(value)
        return cls(**kwargs)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'ExportOptions':
        """Read defaults from the 'export' section of a loaded config."""
        return cls.from_dict(get_config_value(config, 'export', {}) or {})

    def replace(self, **changes) -> 'ExportOptions':
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update(changes)
        return ExportOptions(**values)
