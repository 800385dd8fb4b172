from __future__ import annotations

import argparse
import logging
import random

import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation, PillowWriter

from ikebana_wall.bus import FlowerBus
from ikebana_wall.composer import SpriteAnimator
from ikebana_wall.config import (
    DEFAULT_SEASON,
    DEFAULT_SEED,
    ensure_output_dir,
    out,
    unique_suffix,
)
from ikebana_wall.export import PREVIEW_NOT_FOUND, export_png
from ikebana_wall.maker import FlowerMaker
from ikebana_wall.models import DEFAULT_PLACEMENT_HEIGHT, Drop, Season, Stage
from ikebana_wall.render import draw_wall, new_wall_figure, render_preview, schedule_sprites
from ikebana_wall.wall import CompositionWall

logger = logging.getLogger(__name__)


def parse_drop(text: str) -> Drop:
    """'X,Y' in wall pixels."""
    try:
        x, y = (float(v) for v in text.split(","))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected X,Y got {text!r}") from exc
    return Drop(x, y)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ikebana-wall",
        description="Compose generated flowers into an ikebana arrangement.",
    )
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED)
    parser.add_argument("--count", type=int, default=3, help="Number of flowers to send")
    parser.add_argument(
        "--season", type=str, choices=[s.value for s in Season], default=DEFAULT_SEASON.value
    )
    parser.add_argument(
        "--placement-height",
        type=float,
        default=DEFAULT_PLACEMENT_HEIGHT,
        help="0..1, how tall the stems stand (default: 0.62)",
    )
    parser.add_argument(
        "--drop",
        type=parse_drop,
        action="append",
        default=[],
        help="Drop point X,Y for the next flower; repeat for later flowers",
    )
    parser.add_argument("--width", type=float, default=None)
    parser.add_argument("--height", type=float, default=None)
    parser.add_argument(
        "--randomize", action="store_true", help="Randomize every design before sending it"
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=".",
        help="Directory to write images and CSV files (default: current folder).",
    )
    parser.add_argument("--prefix", type=str, default="ikebana")
    parser.add_argument(
        "--preview-gif", action="store_true", help="Also write an animated GIF of the wall"
    )
    parser.add_argument("--frames", type=int, default=48)
    parser.add_argument("--fps", type=int, default=12)
    parser.add_argument(
        "--interactive", action="store_true", help="Open the maker and the wall in a window"
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def compose(args, wall: CompositionWall, maker: FlowerMaker) -> None:
    """Send args.count flowers through the maker."""
    for i in range(args.count):
        if args.randomize:
            maker.randomize_all()
        else:
            maker.set_seed(args.seed + i)
        drop = args.drop[i] if i < len(args.drop) else None
        maker.send(drop)


def write_gif(wall: CompositionWall, path: str, frames: int, fps: int) -> str:
    """Animate the sway of every flower on the wall into a GIF."""
    fig, ax = new_wall_figure(wall.stage, season=wall.season)
    images = draw_wall(ax, wall.flowers, wall.stage, wall.season)
    animator = SpriteAnimator()
    schedule_sprites(animator, images, wall.flowers)

    def update(i):
        animator.tick(i / fps)
        return list(images.values())

    anim = FuncAnimation(fig, update, frames=frames, interval=1000 / fps, blit=False)
    try:
        anim.save(path, writer=PillowWriter(fps=fps))
    finally:
        animator.cancel_all()
        plt.close(fig)
    return path


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.count < 0:
        parser.error("--count must be >= 0")
    if args.frames < 1 or args.fps < 1:
        parser.error("--frames and --fps must be positive")
    if len(args.drop) > args.count:
        parser.error("more --drop points than --count flowers")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    logger.debug("arguments: %s", vars(args))

    season = Season(args.season)
    bus = FlowerBus()
    wall = CompositionWall(bus, Stage.from_size(args.width, args.height), season=season)
    maker = FlowerMaker(bus, season=season, rng=random.Random(args.seed), seed=args.seed)
    maker.set_param("placement_height", args.placement_height)

    if args.interactive:
        from ikebana_wall.app import run

        compose(args, wall, maker)
        run(wall, maker, args.output_dir)
        return

    ensure_output_dir(args.output_dir)
    suf = unique_suffix()
    out_prefix = out(args.output_dir, f"{args.prefix}_{suf}")

    compose(args, wall, maker)
    roles = ", ".join(str(f.role) for f in wall.flowers)
    print(f"[wall] {len(wall)} flower(s) on a {wall.stage.width:g}x{wall.stage.height:g} stage  roles=[{roles}]")

    written = []
    png = wall.export_png(f"{out_prefix}_wall.png")
    if png:
        written.append(png)
    written.append(wall.export_csv(f"{out_prefix}_composition.csv"))
    preview = export_png(
        lambda: render_preview(maker.params, maker.seed),
        f"{out_prefix}_flower.png",
        wall.alert,
        missing=PREVIEW_NOT_FOUND,
        scale=1,
    )
    if preview:
        written.append(preview)
    if args.preview_gif:
        written.append(write_gif(wall, f"{out_prefix}_wall.gif", args.frames, args.fps))

    for path in written:
        print(f"[export] {path}")


if __name__ == "__main__":
    main()
