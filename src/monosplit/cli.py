"""CLI for monosplit."""

import sys

import rich_click as click
from rich.console import Console

from monosplit import display

# Configure rich-click for pretty help output
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.USE_MARKDOWN = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = "Try running '--help' for more information."
click.rich_click.MAX_WIDTH = 100
click.rich_click.STYLE_OPTION = "bold cyan"
click.rich_click.STYLE_ARGUMENT = "bold cyan"
click.rich_click.STYLE_COMMAND = "bold green"
click.rich_click.STYLE_SWITCH = "bold yellow"
from monosplit import process
from monosplit.models import RunnerState, SplitDirection
from monosplit.runner import Runner, RunnerError


console = Console()


def split_options(func):
    """Options shared by split-in and split-out."""
    decorators = [
        click.argument("repo_file", metavar="REPO_FILE"),
        click.option(
            "--dry-run", "-d", is_flag=True,
            help="Print the git commands that would run instead of running them. "
                 "The dependency, clean tree and repo file checks still run."
        ),
        click.option(
            "--verbose", "-v", is_flag=True,
            help="Describe each step as it runs."
        ),
        click.option(
            "--rebase", "-r", is_flag=True,
            help="After filtering, rebase the output branch onto the branch "
                 "you started from."
        ),
        click.option(
            "--topbase", "-t", is_flag=True,
            help="After filtering, replay only the commits of the output branch "
                 "that the branch you started from does not have yet."
        ),
        click.option(
            "--output-branch", "-o", default=None, metavar="NAME",
            help="Name of the branch to create. Defaults to a name derived "
                 "from the repo file."
        ),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


@click.group()
def cli():
    """**monosplit** - Move history in and out of a monorepo.

    Every file keeps its commit history: nothing is squashed.

    **Examples:**

        monosplit split-out lib.toml            lib/ -> branch 'lib'

        monosplit split-out lib.toml --dry-run  Show the commands only

        monosplit split-in lib.toml --rebase    Bring lib's history back in

    **Repo file (TOML):**

        remote_repo = "https://github.com/me/lib.git"

        include_as = ["lib/", ""]

        exclude = "lib/tmp/"

    **Requires:** git and git-filter-repo on your PATH.
    """


@cli.command("split-out")
@split_options
def split_out(repo_file, dry_run, verbose, rebase, topbase, output_branch):
    """Extract part of this repository into a new branch with its history.

    The output branch is created from the current branch, then rewritten
    by git-filter-repo according to the include, include_as and exclude
    rules of REPO_FILE.
    """
    state = RunnerState(
        direction=SplitDirection.SPLIT_OUT,
        repo_file_path=repo_file,
        dry_run=dry_run,
        verbose=verbose,
        should_rebase=rebase,
        should_topbase=topbase,
        output_branch=output_branch,
    )
    _run(state)


@cli.command("split-in")
@split_options
@click.option(
    "--input-branch", "-i", default=None, metavar="NAME",
    help="Merge this local branch instead of pulling remote_repo."
)
def split_in(repo_file, dry_run, verbose, rebase, topbase, output_branch, input_branch):
    """Bring another project's history into this repository.

    A new orphan branch is filled with the history of remote_repo (or
    --input-branch), then rewritten so its files land where REPO_FILE
    maps them. Use --rebase or --topbase to put it on top of your branch.
    """
    state = RunnerState(
        direction=SplitDirection.SPLIT_IN,
        repo_file_path=repo_file,
        dry_run=dry_run,
        verbose=verbose,
        should_rebase=rebase,
        should_topbase=topbase,
        output_branch=output_branch,
        input_branch=input_branch,
    )
    _run(state)


def _run(state: RunnerState) -> None:
    try:
        status = Runner(state).run()
    except RunnerError as e:
        display.print_error(str(e))
        sys.exit(1)

    sys.exit(status)


@cli.command()
def version():
    """Show version and check external dependencies."""
    from monosplit import __version__

    console.print(f"monosplit version {__version__}")
    console.print()

    display.print_dependency("git", process.executed_successfully(["git", "--version"]))
    display.print_dependency(
        "git-filter-repo",
        process.executed_successfully(["git", "filter-repo", "--version"]),
    )


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
