# type: ignore
import os

from invoke import task


@task
def venv(ctx):
    """Initialize development environment with uv."""
    print("Initializing development environment with uv...")

    ctx.run("uv sync --all-extras")

    print("Development environment initialization complete!")


@task
def clean(ctx):
    """
    Remove all files and directories that are not under version control.
    Use caution as this operation cannot be undone and might remove untracked files.
    """

    ctx.run("git clean -nfdx")

    response = (
        input("Are you sure you want to remove all untracked files? (y/n) [n]: ")
        .strip()
        .lower()
    )
    if response == "y":
        ctx.run("git clean -fdx")


@task
def lint(ctx):
    """
    Run ruff and mypy over the package sources.
    """
    ctx.run("ruff check src tests", pty=True)
    ctx.run("ruff format --check src tests", pty=True)
    ctx.run("mypy src", pty=True)


@task
def test(ctx):
    """
    Run tests with coverage information.
    """
    ctx.run("pytest --cov=src --cov-report=term-missing", pty=True)


@task
def mock_scan(ctx, duration=3):
    """
    Run a scan against the scripted mock peripherals.
    """
    ctx.run(f"blepanel scan --mock --duration {duration}", pty=True)


@task
def mock_connect(ctx, address="F0:99:B6:12:4C:A3", verbose=False):
    """
    Connect to one mock peripheral and list its services.
    """
    flags = "--verbose " if verbose else ""
    ctx.run(f"blepanel {flags}connect --mock {address}", pty=True)


@task
def build_package(ctx):
    """
    Build package using uv.
    """

    ctx.run("rm -rf dist")
    ctx.run("uv build")


@task
def release(ctx):
    """Build package and publish to PyPI using uv."""
    token = os.getenv("PYPI_TOKEN")
    if not token:
        raise ValueError("PYPI_TOKEN environment variable is not set")

    print("Building package...")
    ctx.run("invoke build-package")

    print("Publishing to PyPI...")
    ctx.run(f"uv publish --token {token}")
