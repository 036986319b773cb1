"""Test helpers for kratix-local tools."""

from kratix_local.command import Command, run

KRATIX_LOCAL_BIN = "kratix-local"


async def run_command(args: list[str], env: dict[str, str] | None = None) -> str:
    return await run(Command([KRATIX_LOCAL_BIN] + args, env=env))
