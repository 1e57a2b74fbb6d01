"""Terraform configuration reader for terraform-ops.

Reads the `terraform {}` settings block (required_version, required_providers
and backend) from the top-level .tf files of one or more directories.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
import hcl2

from tfops.exceptions import ConfigParseError

logger = logging.getLogger(__name__)


def _unquote(value: Any) -> Any:
    # Some python-hcl2 releases keep the surrounding quotes of string literals
    if isinstance(value, str) and len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def _blocks(value: Any) -> List[Dict[str, Any]]:
    """python-hcl2 returns repeated blocks as a list of dicts."""
    if isinstance(value, dict):
        return [value]
    if isinstance(value, list):
        return [item for item in value if isinstance(item, dict)]
    return []


def _attributes(value: Any) -> Dict[str, Any]:
    # Newer python-hcl2 releases tag block bodies with "__is_block__" style keys
    if not isinstance(value, dict):
        return {}
    return {k: v for k, v in value.items() if not str(k).startswith("__")}


def _scalar_text(value: Any) -> Optional[str]:
    value = _unquote(value)
    if isinstance(value, bool):
        return json.dumps(value)
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value
    return None


def find_tf_files(path: str) -> List[Path]:
    """Return top-level .tf files of a directory in name order."""
    return sorted(p for p in Path(path).iterdir() if p.is_file() and p.suffix == ".tf")


def parse_tf_file(filename: str) -> Dict[str, Any]:
    """Parse a single .tf file with python-hcl2.

    Raises:
        ConfigParseError: File cannot be read or is not valid HCL2
    """
    try:
        with click.open_file(filename, "r", encoding="utf8") as f:
            return hcl2.load(f)
    except OSError as e:
        raise ConfigParseError(filename, "failed to read file", e) from e
    except Exception as e:
        raise ConfigParseError(filename, "failed to parse HCL", e) from e


def collect_terraform_settings(hcl_dict: Dict[str, Any], dest: Dict[str, Any]) -> None:
    """Merge the terraform blocks of one parsed file into dest.

    The first non-empty required_version and the first backend win;
    required_providers accumulate across files.
    """
    for block in _blocks(hcl_dict.get("terraform")):
        version = _scalar_text(block.get("required_version"))
        if version and "required_version" not in dest:
            dest["required_version"] = version

        for providers in _blocks(block.get("required_providers")):
            for name, spec in _attributes(providers).items():
                constraint = ""
                if isinstance(spec, dict):
                    constraint = _scalar_text(spec.get("version")) or ""
                else:
                    constraint = _scalar_text(spec) or ""
                dest["required_providers"][_unquote(name)] = constraint

        for backend in _blocks(block.get("backend")):
            if "backend" in dest:
                break
            for backend_type, settings in _attributes(backend).items():
                config = {}
                for key, value in _attributes(settings).items():
                    text = _scalar_text(value)
                    if text is not None:
                        config[key] = text
                dest["backend"] = {"type": _unquote(backend_type)}
                if config:
                    dest["backend"]["config"] = config
                break


def get_terraform_info(paths: List[str]) -> List[Dict[str, Any]]:
    """
    Collect terraform block settings for each directory.

    Args:
        paths: Directories containing Terraform configuration

    Returns:
        One dict per readable directory:
        {"path": abs_path, "terraform": {"required_version", "backend",
        "required_providers"}}; absent settings are omitted, except
        required_providers which is always present
    """
    all_info = []
    for path in paths:
        if not os.path.isdir(path):
            logger.warning(f"Path '{path}' does not exist or is not a directory")
            continue

        settings: Dict[str, Any] = {"required_providers": {}}
        for tf_file in find_tf_files(path):
            try:
                hcl_dict = parse_tf_file(str(tf_file))
            except ConfigParseError as e:
                logger.warning(str(e))
                continue
            collect_terraform_settings(hcl_dict, settings)

        all_info.append({"path": os.path.abspath(path), "terraform": settings})
    return all_info
