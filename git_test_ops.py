"""
Simple API for Git operations, used by the tests to build fixture repositories.
"""
import os
from typing import List
from utils import exec_cmd, CmdResult

def create_repo(path: str, default_branch: str = "master"):
    os.makedirs(path, exist_ok=True)
    exec_cmd(["git", "init", f"--initial-branch={default_branch}"], cwd=path, capture=True)
    exec_cmd(["git", "config", "user.email", "a@b.c"], cwd=path)
    exec_cmd(["git", "config", "user.name", "tester"], cwd=path)
    exec_cmd(["git", "commit", "--allow-empty", "-m", "Initial commit"], cwd=path, capture=True)

def write_file(repo: str, filename: str, content: str):
    full_path = os.path.join(repo, filename)
    os.makedirs(os.path.dirname(full_path), exist_ok=True)
    with open(full_path, "w") as f:
        f.write(content)

def commit_file(repo: str, filename: str, content: str, msg: str):
    write_file(repo, filename, content)
    exec_cmd(["git", "add", filename], cwd=repo)
    exec_cmd(["git", "commit", "-m", msg], cwd=repo, capture=True)

def create_bare_remote(repo_path: str, remote_path: str) -> str:
    """
    Make a bare clone of `repo_path` at `remote_path`, so it can be cloned from and pushed to.
    """
    exec_cmd(["git", "clone", "--bare", repo_path, remote_path], capture=True)
    return remote_path

def get_commit_hash(repo: str, ref: str) -> str:
    result: CmdResult = exec_cmd(["git", "rev-parse", ref], cwd=repo, capture=True)
    return result.stdout.strip()

def list_tracked_files(repo: str, ref: str) -> List[str]:
    result: CmdResult = exec_cmd(["git", "ls-tree", "-r", "--name-only", ref], cwd=repo, capture=True)
    return [line for line in result.stdout.splitlines() if line]

def push_file(work_repo: str, remote: str, branch: str, filename: str, content: str, msg: str):
    """Commit a file in `work_repo` and push `branch` to `remote` (a name or a path)."""
    commit_file(work_repo, filename, content, msg)
    exec_cmd(["git", "push", remote, branch], cwd=work_repo, capture=True)
