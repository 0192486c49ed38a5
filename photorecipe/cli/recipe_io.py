"""
Reading recipe files for the CLI.

A recipe file is a JSON or YAML mapping in the flat collaborator key
scheme accepted by AdjustmentVector.from_dict.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from ..recipe.models import AdjustmentVector

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {'.yaml', '.yml'}


class RecipeLoadError(Exception):
    """Raised when a recipe file cannot be read or is not a mapping."""
    pass


def read_recipe_data(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load the raw mapping from a recipe file.

    Args:
        path: .json, .yaml or .yml file

    Returns:
        Recipe mapping. A top-level 'recipe' or 'adjustments' key is
        unwrapped when present.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding='utf-8')
    except OSError as e:
        raise RecipeLoadError(f"Cannot read {path}: {e}") from e

    try:
        if path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (ValueError, yaml.YAMLError) as e:
        raise RecipeLoadError(f"Cannot parse {path}: {e}") from e

    if isinstance(data, dict):
        for wrapper in ('recipe', 'adjustments'):
            if isinstance(data.get(wrapper), dict):
                data = data[wrapper]
                break
    if not isinstance(data, dict):
        raise RecipeLoadError(f"{path} does not contain a recipe mapping")
    return data


def load_recipe(path: Union[str, Path]) -> AdjustmentVector:
    """Load a recipe file into an AdjustmentVector; the file stem names unnamed recipes."""
    path = Path(path)
    data = read_recipe_data(path)
    vector = AdjustmentVector.from_dict(data)
    if vector.name is None:
        vector = vector.replace(name=path.stem)
    logger.debug(f"Loaded recipe '{vector.name}' from {path}")
    return vector
