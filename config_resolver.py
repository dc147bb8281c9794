"""
Resolve the uploader configuration from command-line flags and the JSON
config file, and derive the local checkout paths from it.
"""
import argparse
import dataclasses
import json
import os
from typing import List

from models import UploaderConfig, DEFAULT_TEMP_PATH
from utils import LogLevel, log_print

DEFAULT_CONFIG_PATH = "./.svs-blog-uploader-config.json"
BUILD_DIR_NAME = "svs-uploader-build"

def flag_defaults(args: argparse.Namespace) -> dict:
    """
    The base layer: flag values, falling back to hardcoded defaults.
    Keys use the JSON (camelCase) spelling so the file layer can overlay it.
    """
    return {
        "tempPath": args.temp if args.temp is not None else DEFAULT_TEMP_PATH,
        "srcRepo": args.src,
        "destRepo": args.dest,
    }

def load_config_file(path: str) -> dict:
    """
    Returns the JSON object stored at `path`, or an empty dict if there is no such file.
    Malformed JSON is not handled here, json.JSONDecodeError propagates.
    """
    if not os.path.exists(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        file_config = json.load(f)
    if file_config is None:
        return {}
    if not isinstance(file_config, dict):
        raise RuntimeError(f"Config file {path} must contain a JSON object, got {type(file_config).__name__}")
    return file_config

def resolve_config(args: argparse.Namespace) -> UploaderConfig:
    """
    Merge flags and the config file into one record.
    File values win over flags; flags are not re-applied after the overlay.
    """
    config_path = args.config if args.config is not None else DEFAULT_CONFIG_PATH
    log_print(LogLevel.DEBUG, "configPath", config_path)
    layers = flag_defaults(args)
    layers.update(load_config_file(config_path))
    return UploaderConfig.from_dict(layers)

def missing_repos(config: UploaderConfig) -> List[str]:
    """Names of the repo roles ("source", "destination") left unset after resolution."""
    missing = []
    if not config.src_repo:
        missing.append("source")
    if not config.dest_repo:
        missing.append("destination")
    return missing

def repo_basename(repo: str) -> str:
    # basename is taken literally ("repo.git" stays "repo.git"), a trailing slash is ignored
    return os.path.basename(repo.rstrip("/"))

def plan_paths(config: UploaderConfig) -> UploaderConfig:
    """
    Returns a copy of `config` with temp_build_path, src_repo_path and dest_repo_path filled in.
    Pure, no filesystem access.
    """
    temp_build_path = os.path.normpath(os.path.join(config.temp_path, BUILD_DIR_NAME))
    return dataclasses.replace(
        config,
        temp_build_path=temp_build_path,
        src_repo_path=os.path.join(temp_build_path, repo_basename(config.src_repo)),
        dest_repo_path=os.path.join(temp_build_path, repo_basename(config.dest_repo)),
    )
