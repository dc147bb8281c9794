import os
import subprocess
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional


class LogLevel(IntEnum):
    ERROR = 0
    FATAL = 1
    INFO = 2
    DEBUG = 3

DEFAULT_LOG_LEVEL = LogLevel.FATAL

# process-wide verbosity, set once by the CLI
current_verbosity: int = DEFAULT_LOG_LEVEL

def set_verbosity(level: int):
    global current_verbosity
    current_verbosity = level

def log_print(level: LogLevel, tag: str, msg):
    """
    Print `tag msg` when the current verbosity reaches `level`.
    """
    if current_verbosity >= level:
        print(tag, msg)

@dataclass
class CmdResult:
    returncode: int
    stdout: str
    stderr: str

def exec_cmd(cmd: List[str], cwd: Optional[str] = None, capture: bool = False, allow_failure: bool = False) -> CmdResult:
    """
    Execute a command given as an argument vector and return the result.
    stdio is inherited unless `capture` is set.
    Raises RuntimeError on a non-zero exit code, unless `allow_failure` is set.
    """
    cmd_str = " ".join(cmd)
    log_print(LogLevel.INFO, "exec", f"{cmd_str} (cwd={cwd or '.'})")
    proc = subprocess.run(cmd, cwd=cwd, capture_output=capture, text=True)
    stdout = proc.stdout or ""
    stderr = proc.stderr or ""
    if proc.returncode != 0:
        print(f"Command '{cmd_str}' failed with return code {proc.returncode}")
        if stderr:
            print(f"Error output: {stderr}")
        if not allow_failure:
            raise RuntimeError(f"Command '{cmd_str}' failed with return code {proc.returncode}\n{stderr}\n{stdout}")
    return CmdResult(proc.returncode, stdout, stderr)

def ensure_dir(path: str):
    os.makedirs(path, exist_ok=True)

def header_string(msg: str) -> str:
    msg = "=== " + msg + " ==="
    msg_len = len(msg)
    border = "=" * msg_len
    return f"{border}\n{msg}\n{border}"
