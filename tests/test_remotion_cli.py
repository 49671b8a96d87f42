"""Tests for the Remotion CLI adapter."""

import asyncio
import sys
from pathlib import Path

import pytest

from session_renderer.adapters.remotion_cli import (
    RemotionCliError,
    RemotionCliRenderer,
    parse_compositions,
)
from session_renderer.domain.jobs import RenderTarget

COMPOSITIONS_OUTPUT = """
The following compositions are available:

Protocol-Berg      25      1920x1080      175 (7.00 sec)
SpeakerCard        30      1080x1080      1 (0.03 sec)
"""


def _python_cli(script: str) -> RemotionCliRenderer:
    return RemotionCliRenderer(command=(sys.executable, "-c", script))


def test_parse_compositions_reads_table() -> None:
    targets = parse_compositions(COMPOSITIONS_OUTPUT, "src/index.ts")

    assert targets == [
        RenderTarget(
            id="Protocol-Berg",
            duration_in_frames=175,
            fps=25,
            width=1920,
            height=1080,
            bundle_reference="src/index.ts",
        ),
        RenderTarget(
            id="SpeakerCard",
            duration_in_frames=1,
            fps=30,
            width=1080,
            height=1080,
            bundle_reference="src/index.ts",
        ),
    ]


def test_discover_targets_runs_compositions_command() -> None:
    renderer = _python_cli(
        "import sys; assert sys.argv[1:] == ['compositions', 'src/index.ts'];"
        f" print({COMPOSITIONS_OUTPUT!r})"
    )

    targets = asyncio.run(renderer.discover_targets("src/index.ts"))

    assert [target.id for target in targets] == ["Protocol-Berg", "SpeakerCard"]


def test_render_animated_passes_codec_and_props(tmp_path: Path) -> None:
    output = tmp_path / "out" / "keynote.mp4"
    renderer = _python_cli(
        "import json, sys; args = sys.argv[1:];"
        " assert args[:4] == ['render', 'src/index.ts', 'Intro', sys.argv[4]];"
        " assert args[4] == '--codec=h264';"
        " props = json.loads(args[5].split('=', 1)[1]);"
        " open(sys.argv[4], 'w').write(props['id'])"
    )
    target = RenderTarget(id="Intro", duration_in_frames=175, bundle_reference="src/index.ts")

    asyncio.run(renderer.render_animated(target, output, {"id": "keynote"}, "h264"))

    assert output.read_text() == "keynote"


def test_non_zero_exit_raises_with_stderr_tail(tmp_path: Path) -> None:
    renderer = _python_cli("import sys; sys.stderr.write('Error: asset missing'); sys.exit(3)")
    target = RenderTarget(id="Card", duration_in_frames=1, bundle_reference="src/index.ts")

    with pytest.raises(RemotionCliError, match="asset missing"):
        asyncio.run(renderer.render_still(target, tmp_path / "card.png", {"id": "card"}))


def test_create_splits_command() -> None:
    renderer = RemotionCliRenderer.create("pnpm exec remotion")

    assert renderer.command == ("pnpm", "exec", "remotion")


def test_bundle_writes_to_bundle_dir(tmp_path: Path) -> None:
    bundle_dir = tmp_path / "bundle"
    renderer = RemotionCliRenderer(
        command=(
            sys.executable,
            "-c",
            "import sys; assert sys.argv[1:3] == ['bundle', 'src/index.ts'];"
            f" assert sys.argv[3] == '--out-dir={bundle_dir}'",
        ),
        bundle_dir=bundle_dir,
    )

    assert asyncio.run(renderer.bundle("src/index.ts")) == str(bundle_dir)


def test_cancelled_render_kills_child_process(monkeypatch) -> None:
    spawned: list[asyncio.subprocess.Process] = []
    spawn = asyncio.create_subprocess_exec

    async def recording_spawn(*args, **kwargs):  # type: ignore[no-untyped-def]
        process = await spawn(*args, **kwargs)
        spawned.append(process)
        return process

    monkeypatch.setattr(asyncio, "create_subprocess_exec", recording_spawn)
    renderer = _python_cli("import time; time.sleep(30)")

    async def scenario() -> None:
        task = asyncio.create_task(renderer.discover_targets("src/index.ts"))
        while not spawned:
            await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert spawned[0].returncode is not None
