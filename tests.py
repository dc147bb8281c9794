#!/usr/bin/env python3

import unittest
from unittest import mock
import contextlib
import io
import json
import os
import shutil
import subprocess
import tempfile

import build_ops
import config_resolver
import git_ops
import git_test_ops
import publisher
import uploader
import utils
from models import UploaderConfig, PublishAction, RunReport

GIT_TEST_ENV = {
    # the editor opened by `git commit -v` just writes the message
    "GIT_EDITOR": "echo 'Publish blog' >",
    "GIT_AUTHOR_NAME": "tester",
    "GIT_AUTHOR_EMAIL": "a@b.c",
    "GIT_COMMITTER_NAME": "tester",
    "GIT_COMMITTER_EMAIL": "a@b.c",
}

def parse_args(*argv):
    return uploader.build_arg_parser().parse_args(list(argv))

def write_json(path: str, content):
    with open(path, "w") as f:
        json.dump(content, f)


class TestConfigResolver(unittest.TestCase):
    def setUp(self):
        self.tempdir = tempfile.mkdtemp()
        self.config_path = os.path.join(self.tempdir, "uploader-config.json")

    def tearDown(self):
        shutil.rmtree(self.tempdir)

    def test_missing_file_keeps_flag_values(self):
        args = parse_args("-c", self.config_path, "-s", "src.git", "-d", "dest.git")
        config = config_resolver.resolve_config(args)
        self.assertEqual(config.temp_path, "./temp")
        self.assertEqual(config.src_repo, "src.git")
        self.assertEqual(config.dest_repo, "dest.git")

    def test_file_value_wins_over_flag(self):
        write_json(self.config_path, {"tempPath": "/y"})
        config = config_resolver.resolve_config(parse_args("-c", self.config_path, "--temp", "/x"))
        self.assertEqual(config.temp_path, "/y")

    def test_file_fills_unset_flags(self):
        write_json(self.config_path, {"srcRepo": "https://host/org/blog.git", "destRepo": "https://host/org/site.git"})
        config = config_resolver.resolve_config(parse_args("-c", self.config_path, "-t", "/x"))
        self.assertEqual(config.temp_path, "/x")
        self.assertEqual(config.src_repo, "https://host/org/blog.git")
        self.assertEqual(config.dest_repo, "https://host/org/site.git")

    def test_unknown_keys_are_kept(self):
        write_json(self.config_path, {"srcRepo": "a", "theme": "dark"})
        config = config_resolver.resolve_config(parse_args("-c", self.config_path))
        self.assertEqual(config.extras, {"theme": "dark"})

    def test_null_file_is_an_empty_overlay(self):
        with open(self.config_path, "w") as f:
            f.write("null")
        config = config_resolver.resolve_config(parse_args("-c", self.config_path, "-s", "a"))
        self.assertEqual(config.src_repo, "a")

    def test_malformed_file_raises(self):
        with open(self.config_path, "w") as f:
            f.write("{not json")
        with self.assertRaises(json.JSONDecodeError):
            config_resolver.resolve_config(parse_args("-c", self.config_path))

    def test_non_object_file_raises(self):
        write_json(self.config_path, ["srcRepo"])
        with self.assertRaises(RuntimeError):
            config_resolver.resolve_config(parse_args("-c", self.config_path))

    def test_missing_repos(self):
        self.assertEqual(config_resolver.missing_repos(UploaderConfig()), ["source", "destination"])
        self.assertEqual(config_resolver.missing_repos(UploaderConfig(src_repo="a")), ["destination"])
        self.assertEqual(config_resolver.missing_repos(UploaderConfig(src_repo="a", dest_repo="")), ["destination"])
        self.assertEqual(config_resolver.missing_repos(UploaderConfig(src_repo="a", dest_repo="b")), [])

    def test_verbosity_counts_up_from_fatal(self):
        self.assertEqual(parse_args().verbose, utils.LogLevel.FATAL)
        self.assertEqual(parse_args("-vv").verbose, utils.LogLevel.DEBUG)


class TestPathPlanner(unittest.TestCase):
    def test_basename_is_taken_literally(self):
        config = config_resolver.plan_paths(UploaderConfig(
            temp_path="/tmp",
            src_repo="https://host/org/repo.git",
            dest_repo="git@host:org/site.github.io",
        ))
        self.assertEqual(config.temp_build_path, "/tmp/svs-uploader-build")
        self.assertEqual(config.src_repo_path, "/tmp/svs-uploader-build/repo.git")
        self.assertEqual(config.dest_repo_path, "/tmp/svs-uploader-build/site.github.io")

    def test_relative_temp_and_trailing_slash(self):
        config = config_resolver.plan_paths(UploaderConfig(src_repo="../blog/", dest_repo="/srv/site"))
        self.assertEqual(config.temp_build_path, os.path.join("temp", "svs-uploader-build"))
        self.assertEqual(config.src_repo_path, os.path.join("temp", "svs-uploader-build", "blog"))
        self.assertEqual(config.dest_repo_path, os.path.join("temp", "svs-uploader-build", "site"))

    def test_planning_returns_a_new_record(self):
        config = UploaderConfig(temp_path="/tmp", src_repo="a", dest_repo="b")
        planned = config_resolver.plan_paths(config)
        self.assertIsNone(config.src_repo_path)
        self.assertEqual(planned.src_repo, "a")
        with self.assertRaises(Exception):
            planned.src_repo = "c"


class TestExecCmd(unittest.TestCase):
    def completed(self, returncode: int):
        return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=None, stderr=None)

    def test_failure_raises(self):
        with mock.patch("utils.subprocess.run", return_value=self.completed(2)):
            with self.assertRaises(RuntimeError) as ctx:
                utils.exec_cmd(["git", "status"])
        self.assertIn("git status", str(ctx.exception))
        self.assertIn("return code 2", str(ctx.exception))

    def test_allow_failure_returns_result(self):
        with mock.patch("utils.subprocess.run", return_value=self.completed(1)) as run:
            result = utils.exec_cmd(["git", "status"], cwd="/repo", allow_failure=True)
        self.assertEqual(result, utils.CmdResult(1, "", ""))
        run.assert_called_once_with(["git", "status"], cwd="/repo", capture_output=False, text=True)

    def test_log_print_respects_verbosity(self):
        self.addCleanup(utils.set_verbosity, utils.DEFAULT_LOG_LEVEL)
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            utils.set_verbosity(utils.LogLevel.INFO)
            utils.log_print(utils.LogLevel.DEBUG, "hidden", 1)
            utils.log_print(utils.LogLevel.INFO, "shown", 2)
        self.assertEqual(out.getvalue(), "shown 2\n")


class TestBuildOps(unittest.TestCase):
    def setUp(self):
        self.tempdir = tempfile.mkdtemp()
        self.src = os.path.join(self.tempdir, "src")
        self.dest = os.path.join(self.tempdir, "dest")
        os.makedirs(self.dest)

    def tearDown(self):
        shutil.rmtree(self.tempdir)

    def test_run_build_steps_in_order(self):
        with mock.patch("build_ops.exec_cmd") as exec_cmd:
            build_ops.run_build(self.src)
        self.assertEqual(exec_cmd.call_args_list, [
            mock.call(["npm", "i"], cwd=self.src),
            mock.call(["gulp", "clean"], cwd=self.src),
            mock.call(["npm", "run", "build"], cwd=self.src),
        ])

    def test_run_build_stops_on_failure(self):
        with mock.patch("build_ops.exec_cmd", side_effect=[None, RuntimeError("gulp failed")]) as exec_cmd:
            with self.assertRaises(RuntimeError):
                build_ops.run_build(self.src)
        self.assertEqual(exec_cmd.call_count, 2)

    def test_copy_artifacts_overwrites_and_merges(self):
        git_test_ops.write_file(self.src, "dist/index.html", "new index")
        git_test_ops.write_file(self.src, "dist/posts/new.html", "new post")
        git_test_ops.write_file(self.dest, "index.html", "old index")
        git_test_ops.write_file(self.dest, "posts/old.html", "old post")
        with mock.patch("git_ops.status") as status:
            build_ops.copy_artifacts(self.src, self.dest)
        status.assert_called_once_with(self.dest)
        with open(os.path.join(self.dest, "index.html")) as f:
            self.assertEqual(f.read(), "new index")
        self.assertCountEqual(os.listdir(os.path.join(self.dest, "posts")), ["old.html", "new.html"])

    def test_copy_artifacts_without_dist_raises(self):
        os.makedirs(self.src)
        with mock.patch("git_ops.status") as status:
            with self.assertRaises(RuntimeError):
                build_ops.copy_artifacts(self.src, self.dest)
        status.assert_not_called()

    def test_ensure_build_root_creates_parents(self):
        root = os.path.join(self.tempdir, "temp", "svs-uploader-build")
        build_ops.ensure_build_root(root)
        self.assertTrue(os.path.isdir(root))
        # second call is a no-op
        build_ops.ensure_build_root(root)


class TestRepoSyncCommands(unittest.TestCase):
    def test_clone_commands(self):
        with mock.patch("git_ops.exec_cmd") as exec_cmd:
            git_ops.sync_src_repo("https://host/org/blog.git", "/nonexistent/blog.git")
            git_ops.sync_dest_repo("https://host/org/site.git", "/nonexistent/site.git")
        self.assertEqual(exec_cmd.call_args_list, [
            mock.call(["git", "clone", "https://host/org/blog.git", "--branch", "posts", "--single-branch", "/nonexistent/blog.git"]),
            mock.call(["git", "clone", "https://host/org/site.git", "--single-branch", "/nonexistent/site.git"]),
        ])

    def test_existing_checkout_is_pulled(self):
        path = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, path)
        with mock.patch("git_ops.exec_cmd") as exec_cmd:
            git_ops.sync_src_repo("unused", path)
            git_ops.sync_dest_repo("unused", path)
        self.assertEqual(exec_cmd.call_args_list, [
            mock.call(["git", "pull", "origin", "posts"], cwd=path),
            mock.call(["git", "pull", "origin", "master"], cwd=path),
        ])


class TestPublisher(unittest.TestCase):
    dest = "/srv/site"

    def ask(self, *answers):
        answers_iter = iter(answers)
        def read(prompt):
            try:
                return next(answers_iter)
            except StopIteration:
                raise EOFError()
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            action = publisher.ask_action(read)
        return action, out.getvalue()

    def test_menu_and_valid_choices(self):
        action, output = self.ask("1")
        self.assertIs(action, PublishAction.UPLOAD_POSTS)
        self.assertIn("1. Upload changed files in posts/slides only.", output)
        self.assertIn("3. Abort and exit.", output)
        self.assertIs(self.ask(" 2 ")[0], PublishAction.UPLOAD_ALL)
        self.assertIs(self.ask("3")[0], PublishAction.ABORT)

    def test_invalid_input_is_asked_again(self):
        action, output = self.ask("4", "yes", "", "2")
        self.assertIs(action, PublishAction.UPLOAD_ALL)
        self.assertEqual(output.count(publisher.INVALID_CHOICE_MESSAGE), 3)

    def test_pattern_match_without_action(self):
        action, output = self.ask("12")
        self.assertIsNone(action)
        self.assertIn("Unknown action: 12!!", output)

    def test_end_of_input(self):
        self.assertIsNone(self.ask("9")[0])

    def handle(self, action, exec_side_effect=None):
        report = RunReport("/srv/blog", self.dest)
        with mock.patch("git_ops.exec_cmd", side_effect=exec_side_effect) as exec_cmd:
            with contextlib.redirect_stdout(io.StringIO()):
                code = publisher.handle_action(action, report)
        return code, report, exec_cmd

    def test_upload_posts_stages_posts_and_slides(self):
        code, report, exec_cmd = self.handle(PublishAction.UPLOAD_POSTS)
        self.assertEqual(code, 0)
        self.assertTrue(report.published)
        self.assertEqual(exec_cmd.call_args_list, [
            mock.call(["git", "add", "./posts", "./slides"], cwd=self.dest),
            mock.call(["git", "commit", "-v"], cwd=self.dest),
            mock.call(["git", "push", "origin", "master"], cwd=self.dest),
        ])

    def test_upload_all_stages_whole_tree(self):
        code, report, exec_cmd = self.handle(PublishAction.UPLOAD_ALL)
        self.assertEqual(code, 0)
        self.assertEqual(exec_cmd.call_args_list[0], mock.call(["git", "add", "./"], cwd=self.dest))

    def test_abort_runs_nothing(self):
        code, report, exec_cmd = self.handle(PublishAction.ABORT)
        self.assertEqual(code, 0)
        self.assertFalse(report.published)
        exec_cmd.assert_not_called()

    def test_unknown_action_exits_1(self):
        code, report, exec_cmd = self.handle(None)
        self.assertEqual(code, 1)
        exec_cmd.assert_not_called()

    def test_publish_failure_is_caught_and_exits_0(self):
        code, report, exec_cmd = self.handle(PublishAction.UPLOAD_ALL, [None, RuntimeError("commit aborted")])
        self.assertEqual(code, 0)
        self.assertFalse(report.published)
        self.assertEqual(report.publish_error, "commit aborted")
        # push is never attempted after a failed commit
        self.assertEqual(exec_cmd.call_count, 2)


class TestUploader(unittest.TestCase):
    """Runs the whole upload against real local git remotes, with the npm build mocked out."""

    def setUp(self):
        self.tempdir = tempfile.mkdtemp()
        env_patch = mock.patch.dict(os.environ, GIT_TEST_ENV)
        env_patch.start()
        self.addCleanup(env_patch.stop)

        # source repo, tracked on "posts", with prebuilt output in dist/
        self.src_work = os.path.join(self.tempdir, "src_work")
        git_test_ops.create_repo(self.src_work, "posts")
        git_test_ops.commit_file(self.src_work, "posts/hello.md", "# Hello", "Add hello post")
        git_test_ops.commit_file(self.src_work, "dist/index.html", "new index", "Add index")
        git_test_ops.commit_file(self.src_work, "dist/posts/hello.html", "hello", "Add built post")
        git_test_ops.commit_file(self.src_work, "dist/slides/deck.html", "deck", "Add built slides")
        git_test_ops.commit_file(self.src_work, "dist/assets/app.css", "body {}", "Add css")
        self.src_remote = git_test_ops.create_bare_remote(self.src_work, os.path.join(self.tempdir, "remotes", "blog-src.git"))

        # destination repo, tracked on "master"
        self.dest_work = os.path.join(self.tempdir, "dest_work")
        git_test_ops.create_repo(self.dest_work, "master")
        git_test_ops.commit_file(self.dest_work, "index.html", "old index", "Add index")
        git_test_ops.commit_file(self.dest_work, "posts/old.html", "old", "Add old post")
        git_test_ops.commit_file(self.dest_work, "slides/old.html", "old", "Add old slides")
        self.dest_remote = git_test_ops.create_bare_remote(self.dest_work, os.path.join(self.tempdir, "remotes", "site.git"))

        self.temp_path = os.path.join(self.tempdir, "temp")
        self.build_root = os.path.join(self.temp_path, "svs-uploader-build")
        self.src_path = os.path.join(self.build_root, "blog-src.git")
        self.dest_path = os.path.join(self.build_root, "site.git")
        self.config_path = os.path.join(self.tempdir, "no-such-config.json")
        self.initial_dest_head = git_test_ops.get_commit_hash(self.dest_remote, "master")
        print(utils.header_string("Setup complete"))

    def tearDown(self):
        shutil.rmtree(self.tempdir)

    def run_uploader(self, answer: str, *extra_args):
        argv = ["-c", self.config_path, "-t", self.temp_path, "-s", self.src_remote, "-d", self.dest_remote, *extra_args]
        out = io.StringIO()
        with mock.patch("build_ops.run_build") as run_build, mock.patch("builtins.input", return_value=answer):
            with contextlib.redirect_stdout(out):
                code = uploader.main(argv)
        return code, run_build, out.getvalue()

    def test_upload_all(self):
        code, run_build, output = self.run_uploader("2")
        self.assertEqual(code, 0)
        run_build.assert_called_once_with(self.src_path)
        self.assertIn(f"Source folder = {self.src_path}", output)
        self.assertIn(f"Destination folder = {self.dest_path}", output)

        self.assertNotEqual(git_test_ops.get_commit_hash(self.dest_remote, "master"), self.initial_dest_head)
        published = git_test_ops.list_tracked_files(self.dest_remote, "master")
        for filename in ["index.html", "posts/hello.html", "slides/deck.html", "assets/app.css", "posts/old.html"]:
            self.assertIn(filename, published)

    def test_upload_posts_and_slides_only(self):
        code, _, _ = self.run_uploader("1")
        self.assertEqual(code, 0)
        published = git_test_ops.list_tracked_files(self.dest_remote, "master")
        self.assertIn("posts/hello.html", published)
        self.assertIn("slides/deck.html", published)
        self.assertNotIn("assets/app.css", published)
        # the copied index.html is left unstaged in the checkout
        with open(os.path.join(self.dest_path, "index.html")) as f:
            self.assertEqual(f.read(), "new index")

    def test_abort_leaves_remote_untouched(self):
        code, _, output = self.run_uploader("3")
        self.assertEqual(code, 0)
        self.assertIn("Abort!!", output)
        self.assertEqual(git_test_ops.get_commit_hash(self.dest_remote, "master"), self.initial_dest_head)
        # the build output was still copied into the checkout
        self.assertTrue(os.path.isfile(os.path.join(self.dest_path, "assets", "app.css")))

    def test_unknown_action_exits_1(self):
        code, _, output = self.run_uploader("123")
        self.assertEqual(code, 1)
        self.assertNotIn("Source folder", output)
        self.assertEqual(git_test_ops.get_commit_hash(self.dest_remote, "master"), self.initial_dest_head)

    def test_publish_failure_still_exits_0(self):
        with mock.patch("git_ops.push", side_effect=RuntimeError("push rejected")):
            code, _, output = self.run_uploader("2")
        self.assertEqual(code, 0)
        self.assertIn("Error: push rejected", output)
        self.assertIn(f"Destination folder = {self.dest_path}", output)
        self.assertEqual(git_test_ops.get_commit_hash(self.dest_remote, "master"), self.initial_dest_head)

    def test_second_run_pulls_instead_of_cloning(self):
        self.run_uploader("3")
        git_test_ops.push_file(self.src_work, self.src_remote, "posts", "posts/second.md", "# Second", "Add second post")
        with mock.patch("git_ops.exec_cmd", wraps=utils.exec_cmd) as spy:
            code, _, _ = self.run_uploader("3")
        self.assertEqual(code, 0)
        sync_cmds = [c.args[0] for c in spy.call_args_list if c.args[0][1] in ("clone", "pull")]
        self.assertEqual(sync_cmds, [
            ["git", "pull", "origin", "posts"],
            ["git", "pull", "origin", "master"],
        ])
        self.assertTrue(os.path.isfile(os.path.join(self.src_path, "posts", "second.md")))

    def test_sync_twice_always_pulls(self):
        git_ops.sync_src_repo(self.src_remote, self.src_path)
        with mock.patch("git_ops.exec_cmd", wraps=utils.exec_cmd) as spy:
            git_ops.sync_src_repo(self.src_remote, self.src_path)
            git_ops.sync_src_repo(self.src_remote, self.src_path)
        self.assertEqual([c.args[0] for c in spy.call_args_list], [["git", "pull", "origin", "posts"]] * 2)

    def test_config_file_supplies_repos(self):
        write_json(self.config_path, {"srcRepo": self.src_remote, "destRepo": self.dest_remote, "tempPath": self.temp_path})
        out = io.StringIO()
        with mock.patch("build_ops.run_build"), mock.patch("builtins.input", return_value="3"):
            with contextlib.redirect_stdout(out):
                code = uploader.main(["-c", self.config_path, "-t", "/ignored"])
        self.assertEqual(code, 0)
        self.assertIn(f"Source folder = {self.src_path}", out.getvalue())

    def test_missing_repo_exits_before_side_effects(self):
        write_json(self.config_path, {"srcRepo": self.src_remote})
        out = io.StringIO()
        with mock.patch("utils.subprocess.run") as run:
            with contextlib.redirect_stdout(out):
                code = uploader.main(["-c", self.config_path, "-t", self.temp_path])
        self.assertEqual(code, 1)
        run.assert_not_called()
        self.assertFalse(os.path.exists(self.temp_path))
        self.assertIn("The destination repo is not given.", out.getvalue())
        self.assertIn("usage: svs-blog-uploader", out.getvalue())

    def test_clone_failure_is_fatal(self):
        missing_remote = os.path.join(self.tempdir, "remotes", "missing.git")
        with mock.patch("build_ops.run_build") as run_build:
            with self.assertRaises(RuntimeError):
                uploader.main(["-c", self.config_path, "-t", self.temp_path, "-s", missing_remote, "-d", self.dest_remote])
        run_build.assert_not_called()


if __name__ == "__main__":
    unittest.main()
