"""
Camera-profile (Look) XMP generator.

Same settings vocabulary as the preset generator, wrapped in the
attribute set Lightroom expects for a profile. Exposure is left out
unless explicitly requested.
"""

import uuid
import logging
from typing import Optional

from ..recipe.models import AdjustmentVector
from .options import ExportOptions
from .xmp_common import add_alt, create_packet, crs, prettify_xml, settings_description
from .xmp_generator import PROCESS_VERSION, XMPSettingsWriter, clean_preset_name

logger = logging.getLogger(__name__)

PROFILE_VERSION = '16.5'
DEFAULT_PROFILE_DESCRIPTION = 'Camera profile generated from PhotoRecipe'


def generate_camera_profile(vector: AdjustmentVector, profile_name: Optional[str] = None,
                            options: Optional[ExportOptions] = None) -> str:
    """
    Generate a Look-type camera profile.

    Args:
        vector: Adjustments baked into the profile
        profile_name: Display name (falls back to the vector's name)
        options: Inclusion flags; None means defaults with exposure off

    Returns:
        Complete XMP packet as a string
    """
    if options is None:
        options = ExportOptions(exposure=False)
    # Profiles carry no local corrections or point colors
    options = options.replace(masks=False, point_color=False)

    name = profile_name.strip() if profile_name and profile_name.strip() else clean_preset_name(vector.name)

    root = create_packet()
    description = settings_description(root)
    attributes = (
        ('PresetType', 'Look'),
        ('Cluster', ''),
        ('UUID', str(uuid.uuid4()).upper()),
        ('SupportsAmount', 'true'),
        ('SupportsColor', 'true'),
        ('SupportsMonochrome', 'true'),
        ('SupportsHighDynamicRange', 'true'),
        ('SupportsNormalDynamicRange', 'true'),
        ('SupportsSceneReferred', 'true'),
        ('SupportsOutputReferred', 'true'),
        ('CameraModelRestriction', ''),
        ('Copyright', ''),
        ('ContactInfo', ''),
        ('Version', PROFILE_VERSION),
        ('ProcessVersion', PROCESS_VERSION),
        ('HasSettings', 'true'),
    )
    for key, value in attributes:
        description.set(crs(key), value)

    add_alt(description, 'Name', name)
    add_alt(description, 'ShortName', name)
    add_alt(description, 'Group', options.group_name)
    add_alt(description, 'Description', vector.description or DEFAULT_PROFILE_DESCRIPTION)

    XMPSettingsWriter(vector, options).write(description)

    logger.debug(f"Generated camera profile '{name}'")
    return prettify_xml(root)
