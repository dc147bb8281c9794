"""
Interactive publish step: ask which changes to upload, then stage, commit and
push them in the destination checkout.
"""
import re
from typing import Callable, Optional

import git_ops
from models import PublishAction, RunReport

ACTION_PATTERN = re.compile(r"^[1-3]+$")
INVALID_CHOICE_MESSAGE = "Please choose action from 1 - 3."

def ask_action(input_fn: Optional[Callable[[str], str]] = None) -> Optional[PublishAction]:
    """
    Print the action menu and read answers until one matches ACTION_PATTERN.
    Returns None when the answer names no action (e.g. "12") or input ends.
    """
    print("Choose the number of action to perform:")
    for action in PublishAction:
        print(f"{action.value}. {action.description}")
    while True:
        try:
            choice = (input_fn or input)("action: ").strip()
        except EOFError:
            print("Error: no action given")
            return None
        if ACTION_PATTERN.match(choice):
            break
        print(INVALID_CHOICE_MESSAGE)
    action = PublishAction.from_choice(choice)
    if action is None:
        print(f"Unknown action: {choice}!!")
    return action

def upload_changes(dest_repo_path: str, all_files: bool = False) -> Optional[str]:
    """
    Stage, commit and push the destination checkout.
    Failures are printed and returned as a message instead of raised; None means success.
    """
    paths = ["./"] if all_files else git_ops.PUBLISH_DIRS
    try:
        git_ops.stage(dest_repo_path, paths)
        git_ops.commit_interactive(dest_repo_path)
        git_ops.push(dest_repo_path)
    except (RuntimeError, OSError) as e:
        print(f"Error: {e}")
        return str(e)
    return None

def handle_action(action: Optional[PublishAction], report: RunReport) -> int:
    """
    Run the chosen action and fill in `report`. Returns the process exit code.
    """
    report.action = action
    if action is PublishAction.UPLOAD_POSTS or action is PublishAction.UPLOAD_ALL:
        report.publish_error = upload_changes(report.dest_repo_path, all_files=action is PublishAction.UPLOAD_ALL)
        report.published = report.publish_error is None
        print("Done!!")
    elif action is PublishAction.ABORT:
        print("Abort!!")
    else:
        return 1
    print(report)
    # a caught publish failure still counts as a completed run
    return 0
