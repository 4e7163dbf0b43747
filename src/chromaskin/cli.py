"""
CLI entry point for the texture generator.

Usage:
    chromaskin render [options]
    chromaskin graph [options]
    chromaskin list [styles|schemes|presets]
    python -m chromaskin ...
"""

import argparse
import sys
import time
from dataclasses import replace
from pathlib import Path

import numpy as np

from chromaskin.core.evaluator import compile_preview
from chromaskin.core.graph import default_graph
from chromaskin.io.exporter import ExportSettings, TextureExporter
from chromaskin.texture.driver import RenderConfig, SurfaceAllocationError, TextureRenderer
from chromaskin.texture.inks import CHANNELS
from chromaskin.texture.patterns import STYLE_ALIASES, list_styles, resolve_style
from chromaskin.texture.presets import CATEGORIES, PRESETS, apply_preset, find_presets
from chromaskin.texture.schemes import COLOR_SCHEMES
from chromaskin.texture.settings import CORNER_STYLES, STROKE_STYLES, TextureSettings


def _progress_bar(current: int, total: int, width: int = 35):
    """Print a progress bar to stdout."""
    pct = current / max(total, 1) * 100
    filled = int(width * current / max(total, 1))
    bar = "#" * filled + "-" * (width - filled)
    if sys.stdout.isatty():
        sys.stdout.write(f"\r[{bar}] {pct:5.1f}%  stage {current}/{total}")
        sys.stdout.flush()
        if current >= total:
            sys.stdout.write("\n")
    else:
        print(f"{pct:5.1f}%  stage {current}/{total}", flush=True)


def _fail(message: str):
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def _parse_maps(value: str):
    names = [v.strip() for v in value.split(",") if v.strip()]
    unknown = [n for n in names if n not in CHANNELS]
    if unknown:
        raise argparse.ArgumentTypeError(f"unknown map(s): {', '.join(unknown)}")
    return names


def _add_output_args(parser: argparse.ArgumentParser):
    parser.add_argument("-r", "--resolution", type=int, default=512, help="Texture edge length in pixels (default: 512)")
    parser.add_argument("-o", "--output", type=Path, default=Path("."), help="Output folder (default: .)")
    parser.add_argument("-n", "--name", type=str, default=None, help="File name prefix")
    parser.add_argument(
        "--maps", type=_parse_maps, default=list(CHANNELS),
        help=f"Comma-separated maps to write (default: {','.join(CHANNELS)})",
    )
    parser.add_argument("--suffix", type=str, default="", help="Appended after the map name")
    parser.add_argument("--no-settings", action="store_true", help="Skip the settings JSON sidecar")

    # Post-processing
    parser.add_argument("--no-glow", action="store_true", help="Disable glow")
    parser.add_argument("--no-scanlines", action="store_true", help="Disable scanlines")
    parser.add_argument("--no-vignette", action="store_true", help="Disable vignette")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chromaskin",
        description="Procedural seven-map texture generator",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # render
    render = sub.add_parser("render", help="Render a pattern style to PNG maps")
    render.add_argument("-p", "--preset", type=str, default=None, choices=sorted(PRESETS), help="Start from a preset")
    render.add_argument("-s", "--style", type=str, default=None, help="Pattern style or alias")
    render.add_argument("-c", "--scheme", type=str, default=None, choices=sorted(COLOR_SCHEMES), help="Color scheme")
    render.add_argument("--seed", type=int, default=None, help="Random seed")
    render.add_argument("--density", type=float, default=None, help="Element density (10-500)")
    render.add_argument("--complexity", type=float, default=None, help="Detail level (0-100)")
    render.add_argument("--element-size", type=float, default=None, help="Element size (5-200)")
    render.add_argument("--spacing", type=float, default=None, help="Element spacing (0-200)")
    render.add_argument("--line-width", type=float, default=None, help="Line width (0.5-20)")
    render.add_argument("--rotation", type=float, default=None, help="Rotation in degrees")
    render.add_argument("--glow", type=float, default=None, help="Glow intensity (0-50)")
    render.add_argument("--noise", type=float, default=None, help="Noise amount (0-100)")
    render.add_argument("--stroke", type=str, default=None, choices=STROKE_STYLES, help="Stroke style")
    render.add_argument("--corners", type=str, default=None, choices=CORNER_STYLES, help="Corner style")
    render.add_argument("--no-seamless", action="store_true", help="Disable seamless tiling")
    render.add_argument("--invert-mask", action="store_true", help="Invert the mask map")
    render.add_argument("--invert-roughness", action="store_true", help="Invert the roughness map")
    _add_output_args(render)

    # graph
    graph = sub.add_parser("graph", help="Render the default node graph")
    graph.add_argument("--preview", action="store_true", help="Only print a low-resolution preview summary")
    graph.add_argument("-w", "--workers", type=int, default=1, help="Evaluation threads (default: 1)")
    _add_output_args(graph)

    # list
    listing = sub.add_parser("list", help="List styles, color schemes or presets")
    listing.add_argument("what", nargs="?", default="all", choices=["all", "styles", "schemes", "presets"])
    listing.add_argument("--category", type=str, default=None, choices=CATEGORIES, help="Filter presets by category")
    listing.add_argument("-q", "--query", type=str, default="", help="Filter presets by name or description")

    return parser


def _settings_from_args(args) -> TextureSettings:
    settings = TextureSettings()
    if args.preset:
        settings = apply_preset(settings, args.preset)

    overrides = {
        "style": args.style,
        "color_scheme": args.scheme,
        "seed": args.seed,
        "density": args.density,
        "complexity": args.complexity,
        "element_size": args.element_size,
        "element_spacing": args.spacing,
        "line_width": args.line_width,
        "rotation": args.rotation,
        "glow_intensity": args.glow,
        "noise_amount": args.noise,
        "stroke_style": args.stroke,
        "corner_style": args.corners,
    }
    pattern = replace(settings.pattern, **{k: v for k, v in overrides.items() if v is not None})
    if args.no_seamless:
        pattern = replace(pattern, seamless=False)
    mask = replace(settings.mask, invert=True) if args.invert_mask else settings.mask
    roughness = replace(settings.roughness, invert=True) if args.invert_roughness else settings.roughness
    return replace(settings, pattern=pattern, mask=mask, roughness=roughness)


def _render_config(args, workers: int = 1) -> RenderConfig:
    return RenderConfig(
        resolution=args.resolution,
        workers=workers,
        glow_enabled=not args.no_glow,
        scanlines_enabled=not args.no_scanlines,
        vignette_enabled=not args.no_vignette,
    )


def _export(texture_set, settings, args, base_name):
    exporter = TextureExporter(ExportSettings(
        maps={ch: ch in args.maps for ch in CHANNELS},
        suffix=args.suffix,
        write_settings=not args.no_settings,
    ))
    try:
        paths = exporter.export(texture_set, args.output, base_name, texture_settings=settings)
    except OSError as exc:
        _fail(f"Could not write textures to {args.output}: {exc}")
    for path in paths:
        print(f"  {path}")


def cmd_render(args):
    settings = _settings_from_args(args)
    style = resolve_style(settings.pattern.style)
    requested = settings.pattern.style.strip().lower()
    if requested != style and requested not in STYLE_ALIASES:
        print(f"Unknown style {settings.pattern.style!r}, falling back to {style}")

    print(f"Rendering {style} at {args.resolution}x{args.resolution} (seed {settings.pattern.seed})")
    t0 = time.time()
    renderer = TextureRenderer(_render_config(args))
    try:
        texture_set = renderer.render(settings, progress_callback=_progress_bar)
    except SurfaceAllocationError as exc:
        _fail(str(exc))
    print(f"  Render took {time.time() - t0:.2f}s")

    _export(texture_set, settings, args, args.name or style)


def cmd_graph(args):
    graph = default_graph()

    if args.preview:
        preview = compile_preview(graph)
        mean = preview[..., :3].reshape(-1, 3).mean(axis=0)
        print(f"Preview {preview.shape[1]}x{preview.shape[0]}")
        print(f"  Mean color: ({mean[0]:.1f}, {mean[1]:.1f}, {mean[2]:.1f})")
        print(f"  Range: {int(np.min(preview[..., :3]))}-{int(np.max(preview[..., :3]))}")
        return

    settings = TextureSettings()
    print(f"Rendering default graph at {args.resolution}x{args.resolution} ({args.workers} worker(s))")
    t0 = time.time()
    renderer = TextureRenderer(_render_config(args, workers=max(1, args.workers)))
    try:
        texture_set = renderer.render(settings, graph=graph, progress_callback=_progress_bar)
    except SurfaceAllocationError as exc:
        _fail(str(exc))
    print(f"  Render took {time.time() - t0:.2f}s")

    _export(texture_set, settings, args, args.name or "graph")


def cmd_list(args):
    if args.what in ("all", "styles"):
        styles, aliases = list_styles()
        print("Styles:")
        for name in styles:
            print(f"  {name}")
        print("Aliases:")
        for alias in aliases:
            print(f"  {alias} -> {resolve_style(alias)}")
    if args.what in ("all", "schemes"):
        print("Color schemes:")
        for scheme in COLOR_SCHEMES.values():
            print(f"  {scheme.id:<10} {scheme.name}")
    if args.what in ("all", "presets"):
        print("Presets:")
        for preset in find_presets(args.query, args.category):
            print(f"  {preset.id:<16} [{preset.category}] {preset.name} - {preset.description}")


def main(argv=None):
    parser = _build_parser()
    args = parser.parse_args(argv)

    if getattr(args, "resolution", 8) < 1:
        _fail(f"Resolution must be positive, got {args.resolution}")

    commands = {"render": cmd_render, "graph": cmd_graph, "list": cmd_list}
    commands[args.command](args)


if __name__ == "__main__":
    main()
