"""
Spiegel Wizard Validators

Input validation for step names, resource names, page regions and
descriptor payloads.
"""

import re
from typing import Any, Tuple


STEP_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_\-]+$")
REGION_PATTERN = re.compile(r"^#[A-Za-z][A-Za-z0-9_\-]*$")


def validate_step_name(name: Any) -> Tuple[bool, str]:
    """Validate a step name.

    Step names double as directory names under the steps directory.

    Args:
        name: The candidate step name

    Returns:
        Tuple of (is_valid, message)
    """
    if not isinstance(name, str):
        return False, "Step name must be a string"

    if not name:
        return False, "Step name is required"

    if not STEP_NAME_PATTERN.match(name):
        return False, "Step names may only contain letters, digits, '_' and '-'"

    return True, "Valid step name"


def validate_resource_name(name: Any) -> Tuple[bool, str]:
    """Validate a view, style or script resource name.

    Accepts either a bare file name or '<step>/<file>'.

    Args:
        name: The candidate resource name

    Returns:
        Tuple of (is_valid, message)
    """
    if not isinstance(name, str):
        return False, "Resource name must be a string"

    if not name.strip():
        return False, "Resource name is required"

    if name.startswith("/") or "\\" in name:
        return False, "Resource names must be relative and use '/'"

    pieces = name.split("/")
    if len(pieces) > 2:
        return False, "Resource names may contain at most one '/'"

    if any(piece in ("", ".", "..") for piece in pieces):
        return False, "Resource names may not contain empty, '.' or '..' parts"

    if len(pieces) == 2:
        valid, _ = validate_step_name(pieces[0])
        if not valid:
            return False, f"'{pieces[0]}' is not a valid step name"

    return True, "Valid resource name"


def validate_region(region: Any) -> Tuple[bool, str]:
    """Validate a page region selector such as '#content-holder'."""
    if not isinstance(region, str) or not region:
        return False, "Region is required"

    if not REGION_PATTERN.match(region):
        return False, "Regions are id selectors like '#content-holder'"

    return True, "Valid region"


def validate_descriptor_data(data: Any) -> Tuple[bool, str]:
    """Validate the decoded contents of a step.json file.

    Args:
        data: Decoded JSON value

    Returns:
        Tuple of (is_valid, message)
    """
    if not isinstance(data, dict):
        return False, "Step descriptor must be a JSON object"

    for field in ("name", "view"):
        if field not in data:
            return False, f"Step descriptor is missing '{field}'"

    valid, message = validate_step_name(data["name"])
    if not valid:
        return False, message

    valid, message = validate_resource_name(data["view"])
    if not valid:
        return False, f"Invalid view: {message}"

    for field in ("styles", "scripts"):
        value = data.get(field, [])
        if not isinstance(value, list):
            return False, f"'{field}' must be a list"
        for item in value:
            valid, message = validate_resource_name(item)
            if not valid:
                return False, f"Invalid entry in '{field}': {message}"

    return True, "Valid step descriptor"


def validate_manifest_data(data: Any) -> Tuple[bool, str]:
    """Validate the decoded contents of a steps.json manifest."""
    if not isinstance(data, list):
        return False, "Steps manifest must be a JSON list of step names"

    seen = set()
    for name in data:
        valid, message = validate_step_name(name)
        if not valid:
            return False, f"Invalid step name {name!r}: {message}"
        if name in seen:
            return False, f"Step '{name}' is listed more than once"
        seen.add(name)

    return True, "Valid steps manifest"
