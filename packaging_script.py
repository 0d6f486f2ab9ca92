#!/usr/bin/env python3
# PYTHON_ARGCOMPLETE_OK

import argparse
import logging
import sys
from pathlib import Path

import argcomplete

import archive
import errors
import plugins.registry
import student_file_policy
import submission_packaging
import tree_processor
import util.general


p = argparse.ArgumentParser(
    add_help=False,
    description="""
Package exercises for a code-grading service.
Generates solution and stub trees from tagged exercise sources,
moves student files between projects,
and assembles gradable packages from student submissions.
""",
    epilog="""
This Python script supports bash completion.
For this, python-argparse needs to be installed and configured.
See https://github.com/kislyuk/argcomplete for more information.
""",
)

g = p.add_argument_group(title="help and debugging")
g.add_argument(
    "-h",
    "--help",
    action="help",
    help="""
Show this help message and exit.
""",
)
g.add_argument(
    "-v",
    "--verbose",
    action="count",
    default=0,
    help="""
Print INFO level (once specified) or DEBUG level (twice specified) logging on standard error.
""",
)

commands = p.add_subparsers(dest="command", required=True, metavar="COMMAND")

c = commands.add_parser(
    "prepare-solution",
    help="Generate the solution of one or more exercises.",
)
c.add_argument("exercises", type=Path, nargs="+", metavar="EXERCISE", help="Exercise directory.")
c.add_argument(
    "-o",
    "--output",
    type=Path,
    required=True,
    metavar="DIR",
    help="""
Directory to write the solution to.
Files of all given exercises end up at their relative paths in this directory.
""",
)

c = commands.add_parser(
    "prepare-stub",
    help="Generate the stub of an exercise, as handed out to students.",
)
c.add_argument("exercise", type=Path, metavar="EXERCISE", help="Exercise directory.")
c.add_argument("-o", "--output", type=Path, required=True, metavar="DIR", help="Directory to write the stub to.")
c.add_argument(
    "--no-hidden",
    action="store_true",
    help="""
Also remove hidden regions.
By default, hidden regions are kept in the stub.
""",
)

c = commands.add_parser(
    "prepare-submission",
    help="Package a student submission for grading.",
)
c.add_argument("submission", type=Path, metavar="SUBMISSION", help="Archive (zip or tar) submitted by the student.")
c.add_argument(
    "--clone",
    type=Path,
    required=True,
    metavar="DIR",
    help="""
The instructor's clone of the exercise.
Exercise files are taken from here.
""",
)
c.add_argument("-o", "--output", type=Path, required=True, metavar="FILE", help="Where to write the package.")
c.add_argument(
    "--stub-archive",
    type=Path,
    metavar="FILE",
    help="""
Archive of the exercise stub.
If given, test files are taken from here instead of from the clone.
""",
)
c.add_argument(
    "--toplevel",
    type=str,
    metavar="NAME",
    help="""
Name of a top-level directory to place all entries of the package in.
By default, entries are placed at the archive root.
""",
)
c.add_argument(
    "--zip",
    action="store_true",
    help="""
Write a zip archive.
By default, a tar archive is written.
""",
)
c.add_argument(
    "--param",
    action="append",
    default=[],
    metavar="KEY=VALUE",
    help="""
A parameter to pass to the grading environment.
Keys may consist of letters and underscores.
Values may additionally contain hyphens.
This option may be specified multiple times.
""",
)
c.add_argument(
    "--array-param",
    action="append",
    default=[],
    metavar="KEY=V1,V2",
    help="""
An array parameter to pass to the grading environment.
Values are separated by commas.
This option may be specified multiple times.
""",
)

c = commands.add_parser(
    "compress-project",
    help="Zip the student files of a project.",
)
c.add_argument("project", type=Path, metavar="PROJECT", help="Project directory.")
c.add_argument("-o", "--output", type=Path, required=True, metavar="FILE", help="Where to write the zip archive.")

c = commands.add_parser(
    "extract-project",
    help="Extract an exercise archive over an existing project, keeping student files.",
)
c.add_argument("archive", type=Path, metavar="ARCHIVE", help="Exercise archive (zip or tar).")
c.add_argument("-t", "--target", type=Path, required=True, metavar="DIR", help="Project directory to extract into.")

argcomplete.autocomplete(p)

logger = logging.getLogger(__name__)


def split_param(s):
    (key, sep, value) = s.partition("=")
    if not sep:
        raise errors.InvalidParamError(s)
    return (key, value)


def params_from_args(args):
    params = submission_packaging.TmcParams()
    for s in args.param:
        params.insert_string(*split_param(s))
    for s in args.array_param:
        (key, values) = split_param(s)
        params.insert_array(key, values.split(","))
    return params


def run(args):
    if args.command == "prepare-solution":
        tree_processor.prepare_solution(args.exercises, args.output)
    elif args.command == "prepare-stub":
        tree_processor.prepare_stub(args.exercise, args.output, keep_hidden=not args.no_hidden)
    elif args.command == "prepare-submission":
        submission_packaging.prepare_submission(
            args.submission,
            args.output,
            toplevel_name=args.toplevel,
            params=params_from_args(args),
            clone_path=args.clone,
            stub_archive=args.stub_archive,
            output_as_zip=args.zip,
        )
    elif args.command == "compress-project":
        plugin = plugins.registry.get_plugin(args.project)
        archive.compress_project(plugin.get_student_file_policy(args.project), args.project, args.output)
    elif args.command == "extract-project":
        # A target that is not yet a project has no student files to keep.
        plugin = plugins.registry.find_plugin(args.target)
        if plugin is None:
            policy = student_file_policy.NothingIsStudentFilePolicy(args.target)
        else:
            policy = plugin.get_student_file_policy(args.target)
        archive.extract_project(policy, args.archive, args.target)


def main(argv=None):
    args = p.parse_args(argv)

    logging.basicConfig(
        format="%(levelname)s %(module)s: %(message)s",
        level={
            0: logging.WARNING,
            1: logging.INFO,
            2: logging.DEBUG,
        }[min(args.verbose, 2)],
    )

    try:
        run(args)
    except errors.PackagingError as e:
        logger.debug("packaging failed", exc_info=True)
        util.general.print_error(e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
