"""Remotion CLI adapter for composition discovery and rendering."""

import asyncio
import json
import logging
import re
import shlex
from dataclasses import dataclass
from pathlib import Path

from session_renderer.domain.jobs import RenderTarget

# e.g. "MainComposition    25      1920x1080      175 (7.00 sec)"
_COMPOSITION_LINE = re.compile(
    r"^(?P<id>[A-Za-z0-9-]+)\s+(?P<fps>\d+(?:\.\d+)?)\s+"
    r"(?P<width>\d+)x(?P<height>\d+)\s+(?P<frames>\d+)\b"
)

_logger = logging.getLogger(__name__)


class RemotionCliError(RuntimeError):
    """The Remotion CLI exited with a non-zero status."""


@dataclass
class RemotionCliRenderer:
    """Drives `remotion bundle|compositions|still|render` as subprocesses."""

    command: tuple[str, ...] = ("npx", "remotion")
    bundle_dir: Path = Path("build/remotion-bundle")
    cwd: Path | None = None

    @classmethod
    def create(
        cls,
        command: str,
        bundle_dir: Path = Path("build/remotion-bundle"),
        cwd: Path | None = None,
    ) -> "RemotionCliRenderer":
        """Create a renderer from a shell-style command string."""
        return cls(command=tuple(shlex.split(command)), bundle_dir=bundle_dir, cwd=cwd)

    async def bundle(self, entry_point: str) -> str:
        """Bundle the project into `bundle_dir`; later commands render from it."""
        await self._run("bundle", entry_point, f"--out-dir={self.bundle_dir}")
        return str(self.bundle_dir)

    async def discover_targets(self, bundle_reference: str) -> list[RenderTarget]:
        """List compositions exposed by the bundle."""
        output = await self._run("compositions", bundle_reference)
        return parse_compositions(output, bundle_reference)

    async def render_still(
        self,
        target: RenderTarget,
        output_path: Path,
        input_props: dict[str, object],
    ) -> None:
        """Render frame zero of the composition as an image."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        await self._run(
            "still",
            _bundle(target),
            target.id,
            str(output_path),
            f"--props={json.dumps(input_props)}",
        )

    async def render_animated(
        self,
        target: RenderTarget,
        output_path: Path,
        input_props: dict[str, object],
        codec: str,
    ) -> None:
        """Render the whole composition as a video."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        await self._run(
            "render",
            _bundle(target),
            target.id,
            str(output_path),
            f"--codec={codec}",
            f"--props={json.dumps(input_props)}",
        )

    async def _run(self, *args: str) -> str:
        """Run the CLI and return stdout; kill the child if cancelled."""
        _logger.debug("Running %s %s", " ".join(self.command), args[0])
        process = await asyncio.create_subprocess_exec(
            *self.command,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=self.cwd,
        )
        try:
            stdout, stderr = await process.communicate()
        except asyncio.CancelledError:
            process.kill()
            await process.wait()
            raise
        if process.returncode != 0:
            tail = stderr.decode(errors="replace").strip().splitlines()[-5:]
            raise RemotionCliError(
                f"remotion {args[0]} exited with {process.returncode}: "
                + " | ".join(tail)
            )
        return stdout.decode(errors="replace")


def parse_compositions(output: str, bundle_reference: str | None = None) -> list[RenderTarget]:
    """Parse the table printed by `remotion compositions`."""
    targets = []
    for line in output.splitlines():
        match = _COMPOSITION_LINE.match(line.strip())
        if match is None:
            continue
        targets.append(
            RenderTarget(
                id=match["id"],
                duration_in_frames=int(match["frames"]),
                fps=round(float(match["fps"])),
                width=int(match["width"]),
                height=int(match["height"]),
                bundle_reference=bundle_reference,
            )
        )
    return targets


def _bundle(target: RenderTarget) -> str:
    if target.bundle_reference is None:
        raise RemotionCliError(f"composition {target.id!r} has no bundle reference")
    return target.bundle_reference
