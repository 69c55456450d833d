"""
Configuration and file reading utilities.

This module reads the JSON files shipped in the package ``config/`` directory:
message templates for errors and warnings, and the default options of the
reader, the inferencer, the detector and the command line. Results are cached,
so repeated lookups never touch the filesystem twice.

Methods
-------
read_config(name)
    Read and cache a JSON configuration file from the package config directory.
read_json(path)
    Read an arbitrary JSON file (uncached), used for user settings files.

Examples
--------
>>> from anomalica._utils import read_config

>>> read_config("messages")["errors"]["empty_input"]
'Input contains no header or no data rows.'
>>> read_config("defaults")["reader"]["batch_size"]
1024
"""

import json
import pathlib
from functools import lru_cache


@lru_cache(maxsize=2)
def read_config(name) -> dict:
    """
    Read and cache JSON configuration files.

    Parameters
    ----------
    name : str
        The name of the configuration file (without .json extension).
        File is located at `config/{name}.json` relative to the package root.

    Returns
    -------
    dict
        The parsed JSON content of the configuration file.

    Raises
    ------
    FileNotFoundError
        If the requested configuration file does not exist.

    Notes
    -----
    - The cache size is set to 2 because anomalica ships 2 configuration
      files (``messages`` and ``defaults``).
    - The returned dict is shared between callers; never mutate it.
    """
    path = pathlib.Path(__file__).resolve().parent.parent / f"config/{name}.json"
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def read_json(path) -> dict:
    """Read a JSON object from ``path`` (no caching)."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in '{path}', got {type(data).__name__}.")
    return data
