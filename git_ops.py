"""
Git commands run against the source and destination checkouts.
"""
import os
from typing import List, Optional

from utils import exec_cmd, CmdResult

SRC_BRANCH = "posts"
DEST_BRANCH = "master"
PUBLISH_DIRS = ["./posts", "./slides"]

def sync_repo(repo_url: str, repo_path: str, branch: str, clone_branch: Optional[str] = None):
    """
    Pull `branch` from origin if `repo_path` already exists, otherwise make a single-branch clone there.
    `clone_branch` is passed as --branch to the clone, the remote default branch is cloned when None.
    """
    if os.path.exists(repo_path):
        exec_cmd(["git", "pull", "origin", branch], cwd=repo_path)
        return
    cmd = ["git", "clone", repo_url]
    if clone_branch is not None:
        cmd += ["--branch", clone_branch]
    cmd += ["--single-branch", repo_path]
    exec_cmd(cmd)

def sync_src_repo(repo_url: str, repo_path: str):
    sync_repo(repo_url, repo_path, SRC_BRANCH, clone_branch=SRC_BRANCH)

def sync_dest_repo(repo_url: str, repo_path: str):
    sync_repo(repo_url, repo_path, DEST_BRANCH)

def status(repo_path: str) -> CmdResult:
    return exec_cmd(["git", "status"], cwd=repo_path)

def stage(repo_path: str, paths: List[str]):
    exec_cmd(["git", "add", *paths], cwd=repo_path)

def commit_interactive(repo_path: str):
    # the commit message is written in the user's editor, with the diff shown (-v)
    exec_cmd(["git", "commit", "-v"], cwd=repo_path)

def push(repo_path: str, branch: str = DEST_BRANCH):
    exec_cmd(["git", "push", "origin", branch], cwd=repo_path)
