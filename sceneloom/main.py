"""
Command line entrypoint.

``render`` loads a project, steps its scenes, writes frames and hands them to
ffmpeg; ``preview`` serves the cached per-scene previews over HTTP.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from .api.server import create_app
from .config import RenderSettings, load_settings
from .encoder import encode
from .errors import SceneLoomError
from .project import load_project, locate_project, read_project_settings
from .renderer import Renderer, RenderResult
from .utils.assets import asset_root
from .utils.logging import configure_logging

LOG = logging.getLogger(__name__)


def _cli_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "start_frame": args.start,
        "end_frame": args.end,
        "output": args.output,
        "out_dir": args.out_dir,
        "keep_frames": True if args.keep_frames else None,
        "seed": args.seed,
    }


def resolve_settings(args: argparse.Namespace) -> RenderSettings:
    """
    Profile < ``project.yaml`` < command line.  Values pinned by the
    project's ``build()`` are merged in later by :func:`render_project`.
    """

    settings = load_settings(args.profile)
    module_file = locate_project(args.project)
    settings = settings.merged(**read_project_settings(module_file.parent))
    return settings.merged(**_cli_overrides(args))


def render_project(args: argparse.Namespace) -> RenderResult:
    settings = resolve_settings(args)
    project = load_project(args.project, settings.canvas())
    settings = settings.merged(**project.settings_overrides()).merged(**_cli_overrides(args))

    with asset_root(project.root or Path.cwd()):
        result = Renderer(settings).render(project.build_scenes(settings.canvas()))
        if args.no_encode:
            LOG.info("Skipping encode; %d frame(s) left in %s", len(result.frames), result.out_dir)
        else:
            encode(result, settings)
    return result


async def serve(preview_dir: Path, host: str = "127.0.0.1", port: int = 8080) -> None:
    """
    Serve scene previews from ``preview_dir`` until interrupted.
    """

    import uvicorn

    app = create_app(preview_dir=preview_dir)
    server_config = uvicorn.Config(
        app=app,
        host=host,
        port=port,
        log_config=None,
        log_level="info",
        reload=False,
    )
    server = uvicorn.Server(config=server_config)

    def _handle_signal(signum: int, frame: Optional[object]) -> None:
        LOG.info("Received signal %s, shutting down preview server...", signum)
        server.should_exit = True

    for signame in ("SIGINT", "SIGTERM"):
        signal.signal(getattr(signal, signame), _handle_signal)

    LOG.info("Serving previews from %s on http://%s:%d", preview_dir, host, port)
    await server.serve()


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="sceneloom", description="SceneLoom batch animation renderer")
    parser.add_argument("--log-level", default="info", help="logging level (debug, info, warning)")
    commands = parser.add_subparsers(dest="command", required=True)

    render = commands.add_parser("render", help="render a project to frames and encode them")
    render.add_argument("project", help="project name under projects/, or a path")
    render.add_argument("start", type=int, nargs="?", default=None, help="first tick to rasterise")
    render.add_argument("end", type=int, nargs="?", default=None, help="last tick to rasterise (-1 = all)")
    render.add_argument("--profile", default=None, help="YAML settings profile")
    render.add_argument("--output", choices=["mp4", "gif", "gifloop", "none"], default=None)
    render.add_argument("--out-dir", type=Path, default=None, help="directory for rendered frames")
    render.add_argument("--seed", type=int, default=None, help="seed for random_move")
    render.add_argument("--keep-frames", action="store_true", help="keep frames after encoding")
    render.add_argument("--no-encode", action="store_true", help="only write frames")

    preview = commands.add_parser("preview", help="serve cached scene previews")
    preview.add_argument("--dir", type=Path, default=Path("out") / "previews", help="preview directory")
    preview.add_argument("--host", default="127.0.0.1", help="bind host for the preview server")
    preview.add_argument("--port", type=int, default=8080, help="bind port for the preview server")

    return parser.parse_args(argv)


def run(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    configure_logging(args.log_level)

    try:
        if args.command == "render":
            result = render_project(args)
            LOG.info("Finished: %d tick(s)", result.tick_count)
        else:
            asyncio.run(serve(args.dir, host=args.host, port=args.port))
    except KeyboardInterrupt:
        LOG.info("Interrupted by user.")
    except SceneLoomError as exc:
        LOG.error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    run()
