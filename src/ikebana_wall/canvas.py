"""
Raster canvas (Pillow)
----------------------
Immediate-mode 2D drawing onto a PIL RGBA image:

- a current transform (translate/rotate) with save()/restore()
- paths made of cubic Bezier segments, filled or stroked
- solid, linear and radial (two-circle) gradient paints with colour stops
- composite modes source-over, lighter, screen, soft-light

Shapes are rasterized with ImageDraw into a 2x coverage mask that is reduced
for antialiasing. Gradients are evaluated with numpy over the shape's
bounding box only and then composited with Image.alpha_composite / ImageChops.
"""

from __future__ import annotations

import math

import numpy as np
from PIL import Image, ImageChops, ImageColor, ImageDraw

from ikebana_wall.geometry import sample_cubic

RGBA = tuple[float, float, float, float]
COMPOSITE_OPS = ("source-over", "lighter", "screen", "soft-light")

SUPERSAMPLE = 2
_CURVE_STEPS = 24


# ---------------------- Colours ----------------------
def hsla(h: float, s: float, l: float, a: float = 1.0) -> RGBA:  # noqa: E741
    """CSS-style hsla(): hue in degrees, saturation/lightness in percent."""
    s = min(100.0, max(0.0, s))
    l = min(100.0, max(0.0, l))  # noqa: E741
    r, g, b = ImageColor.getrgb(f"hsl({h % 360.0:.3f}, {s:.3f}%, {l:.3f}%)")
    return (r / 255.0, g / 255.0, b / 255.0, min(1.0, max(0.0, a)))


def rgba(r: float, g: float, b: float, a: float = 1.0) -> RGBA:
    """CSS-style rgba(): channels 0..255, alpha 0..1."""
    return (r / 255.0, g / 255.0, b / 255.0, min(1.0, max(0.0, a)))


def _to_ints(color: RGBA) -> tuple[int, int, int, int]:
    return tuple(int(min(1.0, max(0.0, c)) * 255.0 + 0.5) for c in color)


def _straight_uint8(premul: np.ndarray) -> np.ndarray:
    alpha = premul[..., 3:4]
    with np.errstate(divide="ignore", invalid="ignore"):
        rgb = np.where(alpha > 0, premul[..., :3] / alpha, 0.0)
    img = np.concatenate([np.clip(rgb, 0.0, 1.0), np.clip(alpha, 0.0, 1.0)], axis=-1)
    return (img * 255.0 + 0.5).astype(np.uint8)


# ---------------------- Paths ----------------------
class CanvasPath:
    """Sub-paths of cubic Beziers, flattened on demand."""

    def __init__(self) -> None:
        self._subpaths: list[list[np.ndarray]] = []
        self._closed: list[bool] = []
        self._cursor: tuple[float, float] | None = None

    def move_to(self, x: float, y: float) -> CanvasPath:
        self._subpaths.append([np.array([[x, y]], dtype=float)])
        self._closed.append(False)
        self._cursor = (x, y)
        return self

    def bezier_curve_to(self, c1x, c1y, c2x, c2y, x, y) -> CanvasPath:
        if self._cursor is None:
            self.move_to(c1x, c1y)
        pts = sample_cubic(self._cursor, (c1x, c1y), (c2x, c2y), (x, y), _CURVE_STEPS)
        self._subpaths[-1].append(pts[1:])
        self._cursor = (x, y)
        return self

    def close(self) -> CanvasPath:
        if self._closed:
            self._closed[-1] = True
            first = self._subpaths[-1][0][0]
            self._cursor = (float(first[0]), float(first[1]))
        return self

    def polylines(self) -> list[tuple[np.ndarray, bool]]:
        """Flattened (N, 2) vertex arrays with their closed flag."""
        return [
            (np.vstack(parts), closed)
            for parts, closed in zip(self._subpaths, self._closed, strict=False)
        ]


# ---------------------- Paints ----------------------
class _Gradient:
    def __init__(self) -> None:
        self._stops: list[tuple[float, RGBA]] = []

    def add_color_stop(self, offset: float, color: RGBA) -> None:
        self._stops.append((min(1.0, max(0.0, float(offset))), color))

    def _param(self, local: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        raise NotImplementedError

    def colors(self, local: np.ndarray) -> np.ndarray:
        """Premultiplied RGBA for each local point, interpolated premultiplied."""
        out = np.zeros((local.shape[0], 4))
        if not self._stops:
            return out
        stops = sorted(self._stops, key=lambda s: s[0])
        offs = np.array([s[0] for s in stops])
        cols = np.array([s[1] for s in stops], dtype=float)
        premul = cols.copy()
        premul[:, :3] *= cols[:, 3:4]
        t, valid = self._param(local)
        t = np.clip(t, 0.0, 1.0)
        for ch in range(4):
            out[:, ch] = np.interp(t, offs, premul[:, ch])
        out[~valid] = 0.0
        return out


class LinearGradient(_Gradient):
    def __init__(self, x0: float, y0: float, x1: float, y1: float) -> None:
        super().__init__()
        self.p0 = np.array([x0, y0], dtype=float)
        self.d = np.array([x1 - x0, y1 - y0], dtype=float)

    def _param(self, local):
        dd = float(self.d @ self.d)
        if dd <= 1e-12:
            return np.zeros(local.shape[0]), np.zeros(local.shape[0], dtype=bool)
        t = ((local - self.p0) @ self.d) / dd
        return t, np.ones(local.shape[0], dtype=bool)


class RadialGradient(_Gradient):
    """Two-circle gradient with canvas semantics (largest omega, r >= 0)."""

    def __init__(self, x0, y0, r0, x1, y1, r1) -> None:
        super().__init__()
        self.c0 = np.array([x0, y0], dtype=float)
        self.cd = np.array([x1 - x0, y1 - y0], dtype=float)
        self.r0 = float(r0)
        self.dr = float(r1 - r0)

    def _param(self, local):
        pd = local - self.c0
        a = float(self.cd @ self.cd) - self.dr * self.dr
        b = pd @ self.cd + self.r0 * self.dr
        c = np.einsum("ij,ij->i", pd, pd) - self.r0 * self.r0
        if abs(a) < 1e-12:
            with np.errstate(divide="ignore", invalid="ignore"):
                w = np.where(np.abs(b) > 1e-12, c / (2.0 * b), -np.inf)
            valid = np.isfinite(w) & (self.r0 + w * self.dr >= 0.0)
            return np.where(valid, w, 0.0), valid
        disc = b * b - a * c
        ok = disc >= 0.0
        root = np.sqrt(np.where(ok, disc, 0.0))
        w1 = (b + root) / a
        w2 = (b - root) / a
        hi = np.maximum(w1, w2)
        lo = np.minimum(w1, w2)
        hi_ok = self.r0 + hi * self.dr >= 0.0
        lo_ok = self.r0 + lo * self.dr >= 0.0
        w = np.where(hi_ok, hi, lo)
        valid = ok & (hi_ok | lo_ok)
        return np.where(valid, w, 0.0), valid


Paint = RGBA | _Gradient


# ---------------------- Blending ----------------------
def composite(dst: Image.Image, src: Image.Image, op: str) -> Image.Image:
    """
    Composite two same-sized RGBA images and return the result.

    screen / soft-light mix the blended colour in where the backdrop is
    opaque, then source-over:  co = as*(1-ab)*Cs + as*ab*B(Cb, Cs) + (1-as)*ab*Cb.
    lighter adds premultiplied channels, clipped.
    """
    if op not in COMPOSITE_OPS:
        raise ValueError(f"Unsupported composite operation: {op}")
    if op == "source-over":
        return Image.alpha_composite(dst, src)
    if op == "lighter":
        bands = [
            ImageChops.add(a, b)
            for a, b in zip(dst.convert("RGBa").split(), src.convert("RGBa").split(), strict=True)
        ]
        return Image.merge("RGBa", bands).convert("RGBA")
    blend = ImageChops.screen if op == "screen" else ImageChops.soft_light
    backdrop = dst.convert("RGB")
    source = src.convert("RGB")
    mixed = Image.composite(blend(backdrop, source), source, dst.getchannel("A"))
    mixed.putalpha(src.getchannel("A"))
    return Image.alpha_composite(dst, mixed)


def rotate_layer(layer: Image.Image, angle: float, center: tuple[float, float]) -> Image.Image:
    """Rotate an RGBA layer by angle (radians, y-down canvas sense) about center."""
    rotated = layer.convert("RGBa").rotate(
        -math.degrees(angle), resample=Image.Resampling.BICUBIC, center=center
    )
    return rotated.convert("RGBA")


# ---------------------- Canvas ----------------------
class Canvas:
    """RGBA image with a 2D transform stack and a current composite mode."""

    def __init__(self, width: float, height: float) -> None:
        self.width = max(1, int(math.ceil(width)))
        self.height = max(1, int(math.ceil(height)))
        self.image = Image.new("RGBA", (self.width, self.height), (0, 0, 0, 0))
        self._ctm = np.eye(3)
        self._stack: list[tuple[np.ndarray, str]] = []
        self.composite_op = "source-over"

    # --- state ---
    def save(self) -> None:
        self._stack.append((self._ctm.copy(), self.composite_op))

    def restore(self) -> None:
        if self._stack:
            self._ctm, self.composite_op = self._stack.pop()

    def _apply(self, m: np.ndarray) -> None:
        self._ctm = self._ctm @ m

    def translate(self, x: float, y: float) -> None:
        self._apply(np.array([[1.0, 0.0, x], [0.0, 1.0, y], [0.0, 0.0, 1.0]]))

    def rotate(self, angle: float) -> None:
        c, s = math.cos(angle), math.sin(angle)
        self._apply(np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]]))

    def set_transform(self, a, b, c, d, e, f) -> None:
        self._ctm = np.array([[a, c, e], [b, d, f], [0.0, 0.0, 1.0]], dtype=float)

    # --- coordinate helpers ---
    def _to_pixels(self, pts: np.ndarray) -> np.ndarray:
        return pts @ self._ctm[:2, :2].T + self._ctm[:2, 2]

    def _to_local(self, pix: np.ndarray) -> np.ndarray:
        inv = np.linalg.inv(self._ctm)
        return pix @ inv[:2, :2].T + inv[:2, 2]

    def _linear_scale(self) -> float:
        return math.sqrt(abs(np.linalg.det(self._ctm[:2, :2])))

    def _bbox(self, pix: np.ndarray, pad: float) -> tuple[int, int, int, int] | None:
        x0 = max(0, int(math.floor(pix[:, 0].min() - pad)))
        y0 = max(0, int(math.floor(pix[:, 1].min() - pad)))
        x1 = min(self.width, int(math.ceil(pix[:, 0].max() + pad)) + 1)
        y1 = min(self.height, int(math.ceil(pix[:, 1].max() + pad)) + 1)
        if x0 >= x1 or y0 >= y1:
            return None
        return x0, y0, x1, y1

    @staticmethod
    def _mask(box) -> tuple[Image.Image, ImageDraw.ImageDraw]:
        x0, y0, x1, y1 = box
        mask = Image.new("L", ((x1 - x0) * SUPERSAMPLE, (y1 - y0) * SUPERSAMPLE), 0)
        return mask, ImageDraw.Draw(mask)

    @staticmethod
    def _mask_points(pix: np.ndarray, box) -> list[tuple[float, float]]:
        shifted = (pix - np.array(box[:2], dtype=float)) * SUPERSAMPLE
        return [(float(x), float(y)) for x, y in shifted]

    def _paint_layer(self, box, paint: Paint) -> Image.Image:
        x0, y0, x1, y1 = box
        if not isinstance(paint, _Gradient):
            return Image.new("RGBA", (x1 - x0, y1 - y0), _to_ints(paint))
        ys, xs = np.mgrid[y0:y1, x0:x1]
        centers = np.column_stack([xs.ravel() + 0.5, ys.ravel() + 0.5])
        premul = paint.colors(self._to_local(centers)).reshape(y1 - y0, x1 - x0, 4)
        return Image.fromarray(_straight_uint8(premul), "RGBA")

    def _blend(self, box, mask: Image.Image, paint: Paint) -> None:
        coverage = mask.reduce(SUPERSAMPLE)
        if coverage.getbbox() is None:
            return
        src = self._paint_layer(box, paint)
        src.putalpha(ImageChops.multiply(src.getchannel("A"), coverage))
        region = self.image.crop(box)
        self.image.paste(composite(region, src, self.composite_op), box[:2])

    # --- drawing ---
    def fill(self, path: CanvasPath, paint: Paint) -> None:
        """Fill every closed-or-not sub-path as a polygon."""
        for poly, _closed in path.polylines():
            if poly.shape[0] < 3:
                continue
            pix = self._to_pixels(poly)
            box = self._bbox(pix, 1.0)
            if box is None:
                continue
            mask, draw = self._mask(box)
            draw.polygon(self._mask_points(pix, box), fill=255)
            self._blend(box, mask, paint)

    def stroke(self, path: CanvasPath, paint: Paint, line_width: float = 1.0) -> None:
        width = line_width * self._linear_scale()
        for poly, closed in path.polylines():
            if closed:
                poly = np.vstack([poly, poly[:1]])
            if poly.shape[0] < 2:
                continue
            pix = self._to_pixels(poly)
            box = self._bbox(pix, width / 2.0 + 1.0)
            if box is None:
                continue
            mask, draw = self._mask(box)
            draw.line(
                self._mask_points(pix, box),
                fill=255,
                width=max(1, int(round(width * SUPERSAMPLE))),
                joint="curve",
            )
            self._blend(box, mask, paint)

    def fill_circle(self, cx: float, cy: float, r: float, paint: Paint) -> None:
        center = self._to_pixels(np.array([[cx, cy]], dtype=float))
        rad = r * self._linear_scale()
        corners = np.vstack([center - rad, center + rad])
        box = self._bbox(corners, 1.0)
        if box is None:
            return
        mask, draw = self._mask(box)
        (ax, ay), (bx, by) = self._mask_points(corners, box)
        draw.ellipse([ax, ay, bx, by], fill=255)
        self._blend(box, mask, paint)

    # --- output ---
    def to_uint8(self) -> np.ndarray:
        """Straight-alpha RGBA uint8 array (H, W, 4)."""
        return np.array(self.image)
