"""
Build the source checkout and move its output into the destination checkout.
"""
import os
import shutil
from typing import List

import git_ops
from utils import exec_cmd, ensure_dir

DIST_DIR = "dist"

# run in order inside the source checkout
BUILD_STEPS: List[List[str]] = [
    ["npm", "i"],
    ["gulp", "clean"],
    ["npm", "run", "build"],
]

def ensure_build_root(path: str):
    if not os.path.exists(path):
        ensure_dir(path)
        print(f"Created build root {path}")

def run_build(src_repo_path: str):
    for step in BUILD_STEPS:
        exec_cmd(step, cwd=src_repo_path)

def copy_artifacts(src_repo_path: str, dest_repo_path: str):
    """
    Copy everything under <src_repo_path>/dist into dest_repo_path, overwriting
    existing files and merging into existing directories, then show `git status`
    of the destination.
    """
    dist_path = os.path.join(src_repo_path, DIST_DIR)
    if not os.path.isdir(dist_path):
        raise RuntimeError(f"Build output not found at {dist_path}")
    for entry in os.listdir(dist_path):
        src = os.path.join(dist_path, entry)
        dest = os.path.join(dest_repo_path, entry)
        if os.path.isdir(src):
            if os.path.isfile(dest):
                os.remove(dest)
            shutil.copytree(src, dest, dirs_exist_ok=True)
        else:
            if os.path.isdir(dest):
                shutil.rmtree(dest)
            shutil.copy2(src, dest)
    git_ops.status(dest_repo_path)
