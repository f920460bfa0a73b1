"""
Temporary shallow checkouts used for file-tree inspection.
"""

import asyncio
import os
import shutil
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from repo_trust_guard.exceptions import CheckoutError


async def _terminate(process: asyncio.subprocess.Process) -> None:
    if process.returncode is not None:
        return
    try:
        process.kill()
    except ProcessLookupError:
        pass
    await process.wait()


@asynccontextmanager
async def temporary_checkout(repo_url: str) -> AsyncIterator[Path]:
    """Shallow-clone a repository into a private temporary directory.

    The directory is unique to the caller and is removed recursively when the
    context exits, whether the body succeeded or raised. A clone still running
    when the caller is cancelled is killed before the directory is removed.

    Args:
        repo_url: Canonical repository URL.

    Yields:
        Path to the checked out working tree.

    Raises:
        CheckoutError: If git is unavailable or the clone fails.
    """
    temp_dir = Path(tempfile.mkdtemp(prefix="rtg-checkout-"))
    checkout_path = temp_dir / "repo"

    try:
        try:
            process = await asyncio.create_subprocess_exec(
                "git",
                "clone",
                "--depth",
                "1",
                "--single-branch",
                "--quiet",
                repo_url,
                str(checkout_path),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env={**os.environ, "GIT_TERMINAL_PROMPT": "0"},
            )
        except FileNotFoundError as e:
            raise CheckoutError("git executable not found on PATH.") from e

        try:
            _, stderr = await process.communicate()
        except BaseException:
            # Cancelled mid-clone: the child must be gone before the rmtree
            await _terminate(process)
            raise
        if process.returncode != 0:
            raise CheckoutError(
                f"Failed to clone {repo_url}: {stderr.decode(errors='replace').strip()}"
            )

        yield checkout_path

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)


def list_tree(root: Path) -> list[Path]:
    """Return the top-level entries of a checkout, sorted by name."""
    return sorted(root.iterdir(), key=lambda entry: entry.name)
