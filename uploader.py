#!/usr/bin/env python3
import argparse
import sys
from typing import Callable, List, Optional

import build_ops
import git_ops
import publisher
from config_resolver import DEFAULT_CONFIG_PATH, resolve_config, missing_repos, plan_paths
from models import UploaderConfig, RunReport, DEFAULT_TEMP_PATH
from utils import DEFAULT_LOG_LEVEL, LogLevel, log_print, set_verbosity, header_string

__version__ = "1.0.0"

def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="svs-blog-uploader",
        description="Build the blog source repo and upload the result to the destination repo",
    )
    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-c", "--config",
        metavar="<path>",
        default=None,
        help=f"The uploader config file path. The default is {DEFAULT_CONFIG_PATH}"
    )
    parser.add_argument(
        "-t", "--temp",
        metavar="<path>",
        default=None,
        help=f"The temp folder to prepare uploaded files. The default is {DEFAULT_TEMP_PATH}"
    )
    parser.add_argument(
        "-s", "--src",
        metavar="<repo>",
        default=None,
        help="The source repo."
    )
    parser.add_argument(
        "-d", "--dest",
        metavar="<repo>",
        default=None,
        help="The destination repo."
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=int(DEFAULT_LOG_LEVEL),
        help="Show verbose information (can be given multiple times)."
    )
    return parser

def run(config: UploaderConfig, input_fn: Optional[Callable[[str], str]] = None) -> int:
    """
    Sync both repos, build, copy the build output and ask what to publish.
    `config` must already have its paths planned. Returns the process exit code.
    """
    build_ops.ensure_build_root(config.temp_build_path)

    print(header_string(f"Syncing source repo {config.src_repo}"))
    git_ops.sync_src_repo(config.src_repo, config.src_repo_path)
    print(header_string(f"Syncing destination repo {config.dest_repo}"))
    git_ops.sync_dest_repo(config.dest_repo, config.dest_repo_path)

    print(header_string("Building"))
    build_ops.run_build(config.src_repo_path)
    build_ops.copy_artifacts(config.src_repo_path, config.dest_repo_path)

    report = RunReport(config.src_repo_path, config.dest_repo_path)
    action = publisher.ask_action(input_fn)
    return publisher.handle_action(action, report)

def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    set_verbosity(args.verbose)

    try:
        config = resolve_config(args)
        missing = missing_repos(config)
        if missing:
            for role in missing:
                print(f"The {role} repo is not given.")
            parser.print_help()
            return 1
        config = plan_paths(config)
        log_print(LogLevel.DEBUG, "configs", config.to_dict())
        return run(config)
    except KeyboardInterrupt:
        return 130

def cli():
    sys.exit(main())

if __name__ == "__main__":
    cli()
