import argparse
import asyncio
import sys
from pathlib import Path

from loguru import logger

from worktree_rainbow.app import BranchColorService
from worktree_rainbow.base import Named
from worktree_rainbow.coordinator import BranchColorCoordinator
from worktree_rainbow.impl.git import discover_repositories, git_available
from worktree_rainbow.impl.json_file import JsonCustomizationsStore
from worktree_rainbow.impl.sql import create_sql_assignment_store
from worktree_rainbow.log import setup_logging
from worktree_rainbow.merger import ConfigurationMerger
from worktree_rainbow.settings import Settings


def build_service(workspace: Path, db_url: str | None) -> BranchColorService:
    settings_path = workspace / ".vscode" / "settings.json"
    coordinator = BranchColorCoordinator(
        store=create_sql_assignment_store(db_url),
        merger=ConfigurationMerger(JsonCustomizationsStore(settings_path)),
        settings=Settings.load(settings_path),
    )
    return BranchColorService(coordinator)


def _repository_paths(workspace: Path) -> list[Path]:
    # The workspace itself plus any working copies directly below it
    return [workspace, *(p for p in sorted(workspace.iterdir()) if p.is_dir())]


async def _watch(service: BranchColorService, workspace: Path, interval: float) -> int:
    repositories = discover_repositories(_repository_paths(workspace))
    if not repositories:
        logger.warning("No git repositories under {}", workspace)
        return 1

    for repo in repositories:
        service.add_repository(repo)

    pollers = [asyncio.create_task(repo.watch(interval)) for repo in repositories]
    try:
        await asyncio.gather(*pollers)
    finally:
        for task in pollers:
            task.cancel()
        await service.close()
    return 0


async def _command(service: BranchColorService, args: argparse.Namespace) -> int:
    paths = [args.file] if args.file else []
    for repo in discover_repositories([*paths, args.workspace]):
        service.add_repository(repo)
    await service.drain()

    active = str(Path(args.file).absolute()) if args.file else None
    try:
        if args.command == "reroll":
            return 0 if await service.reroll(active) else 1
        if args.command == "clear":
            return 0 if await service.clear(active) else 1

        repo = service.resolve_repository(active)
        if repo is None:
            print("No git repository found.", file=sys.stderr)
            return 1
        branch = repo.current_branch()
        if not isinstance(branch, Named):
            print(f"{repo.root} (detached) -")
            return 0
        color = service.coordinator.store.get(repo.root, branch.name)
        print(f"{repo.root} {branch.name} {color or '-'}")
        return 0
    finally:
        await service.close()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="worktree-rainbow",
        description="Color the editor chrome per git branch",
    )
    parser.add_argument(
        "--workspace", type=Path, default=Path.cwd(), help="Workspace directory"
    )
    parser.add_argument(
        "--db", default=None, help="Database URL for stored branch colors"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    watch = sub.add_parser("watch", help="Apply colors as branches change")
    watch.add_argument(
        "--interval", type=float, default=1.0, help="Poll interval in seconds"
    )
    for name, text in [
        ("reroll", "Pick a new color for the current branch"),
        ("clear", "Forget the color of the current branch"),
        ("show", "Print the stored color of the current branch"),
    ]:
        cmd = sub.add_parser(name, help=text)
        cmd.add_argument("--file", default=None, help="Active document path")

    args = parser.parse_args(argv)
    setup_logging()

    if not git_available():
        logger.debug("git not found, nothing to do")
        return 0

    workspace = args.workspace = args.workspace.absolute()
    service = build_service(workspace, args.db)

    try:
        if args.command == "watch":
            return asyncio.run(_watch(service, workspace, args.interval))
        return asyncio.run(_command(service, args))
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
